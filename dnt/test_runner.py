"""
Test harness generator.

Produces `test_runner.js`, a launcher that runs every compiled test file
against both the CommonJS and the ES-module build, and the list of test
artifacts to clean up after the run.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from pathlib import Path

from .fs import ScopedFileWriter
from .transform.types import TransformOutput

logger = logging.getLogger(__name__)

TEST_RUNNER_FILE_NAME = "test_runner.js"

_DECLARATION_RE = re.compile(r"\.d\.ts$", re.IGNORECASE)
_TS_EXTENSION_RE = re.compile(r"\.tsx?$", re.IGNORECASE)

_SHIM_DEFINITIONS = """\
const {{ testDefinitions }} = require({shim_module});
"""

_COLLECTOR_DEFINITIONS = """\
const testDefinitions = [];
globalThis.Deno = globalThis.Deno || {};
globalThis.Deno.test = function (nameOrDefinition, fn) {
  if (typeof nameOrDefinition === "string") {
    testDefinitions.push({ name: nameOrDefinition, fn });
  } else if (typeof nameOrDefinition === "function") {
    testDefinitions.push({ name: nameOrDefinition.name, fn: nameOrDefinition });
  } else {
    testDefinitions.push(nameOrDefinition);
  }
};
"""

_RUNNER_BODY = """\
const filePaths = {file_paths};

async function runTestDefinitions(definitions) {{
  let failed = 0;
  for (const definition of definitions) {{
    if (definition.ignore) {{
      console.log(`test ${{definition.name}} ... ignored`);
      continue;
    }}
    try {{
      await definition.fn({{ name: definition.name }});
      console.log(`test ${{definition.name}} ... ok`);
    }} catch (err) {{
      failed++;
      console.error(`test ${{definition.name}} ... FAILED`);
      console.error(err);
    }}
  }}
  return failed;
}}

async function main() {{
  let failed = 0;
  for (const [i, filePath] of filePaths.entries()) {{
    if (i > 0) {{
      console.log("");
    }}

    const umdPath = "./umd/" + filePath;
    console.log("Running tests in " + umdPath + "...\\n");
    require(umdPath);
    failed += await runTestDefinitions(testDefinitions.splice(0, testDefinitions.length));

    const esmPath = "./esm/" + filePath;
    console.log("\\nRunning tests in " + esmPath + "...\\n");
    await import(esmPath);
    failed += await runTestDefinitions(testDefinitions.splice(0, testDefinitions.length));
  }}

  if (failed > 0) {{
    console.error("\\n" + failed + " test(s) failed");
    process.exit(1);
  }}
}}

main().catch((err) => {{
  console.error(err);
  process.exit(1);
}});
"""


def _to_js_path(path: str) -> str:
    return _TS_EXTENSION_RE.sub(".js", path)


def get_test_runner_code(
    *,
    shim_package_name: str,
    test_entry_points: Sequence[str],
    test_shim_used: bool,
) -> str:
    """
    Render the test launcher script.

    Args:
        shim_package_name: Package providing the Deno namespace
        test_entry_points: Output-relative test file paths
        test_shim_used: Whether the tests reach the Deno namespace through the shim

    Returns:
        JavaScript source of `test_runner.js`
    """
    file_paths = [_to_js_path(p) for p in test_entry_points if not _DECLARATION_RE.search(p)]
    if test_shim_used:
        definitions = _SHIM_DEFINITIONS.format(shim_module=json.dumps(f"{shim_package_name}/test-internals"))
    else:
        definitions = _COLLECTOR_DEFINITIONS
    body = _RUNNER_BODY.format(file_paths=json.dumps(file_paths, indent=2))
    return f'const process = require("process");\n{definitions}\n{body}'


def get_test_file_names(transform_output: TransformOutput) -> list[str]:
    """
    Paths of every test artifact, relative to the output directory.

    Each non-declaration test file yields its ESM and UMD copy; the launcher
    comes last.
    """
    names: list[str] = []
    for file in transform_output.test.files:
        if _DECLARATION_RE.search(file.file_path):
            continue
        js_path = _to_js_path(file.file_path)
        names.append(f"./esm/{js_path}")
        names.append(f"./umd/{js_path}")
    names.append(f"./{TEST_RUNNER_FILE_NAME}")
    return names


async def delete_test_files(writer: ScopedFileWriter, out_dir: Path, file_names: Sequence[str]) -> None:
    """Remove the test artifacts from `out_dir`."""
    for file_name in file_names:
        await writer.remove(Path(out_dir) / file_name)
    logger.debug(f"Removed {len(file_names)} test artifact(s)")
