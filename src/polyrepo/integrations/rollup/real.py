"""Production bundler driving the rollup CLI as a subprocess.

Each batch is described by a generated ES module configuration plus a JSON
data file. Rollup writes every bundle into a private scratch workspace;
the chunks are read back into BundleResults, and each workspace is removed
when its result is closed.
"""

import asyncio
import json
import logging
import re
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path

from polyrepo.core.bundle_types import (
    BundleDescriptor,
    BundleResult,
    OutputChunk,
    PluginReference,
)
from polyrepo.core.errors import BundleError
from polyrepo.integrations.rollup.abc import Bundler

logger = logging.getLogger(__name__)

WARNING_MARKER = "@@polyrepo-warning "

CONFIG_TEMPLATE = """\
// Generated by polyrepo; removed after the run.
import {{ readFileSync }} from "node:fs";
{imports}

const plugins = [{plugin_names}];
const batch = JSON.parse(readFileSync(new URL("./batch.json", import.meta.url), "utf8"));

function external(rule) {{
  const pattern = new RegExp(rule.pathPattern);
  return (id) => !rule.inline.includes(id) && !pattern.test(id);
}}

export default batch.map((entry, index) => ({{
  input: entry.input,
  external: external(entry.external),
  plugins: entry.plugins.map((plugin) => plugins[plugin.index](plugin.options)),
  output: {{
    format: "es",
    file: entry.file,
    sourcemap: entry.sourcemap,
    externalLiveBindings: false,
  }},
  onwarn(warning) {{
    if (entry.suppressedWarnings.includes(warning.code)) return;
    console.error({marker} + JSON.stringify({{index, code: warning.code ?? null, message: String(warning.message)}}));
  }},
}}));
"""

_UNSAFE_NAME = re.compile(r"[^\w.-]+")


class RealRollupBundler(Bundler):
    """Production implementation using the project's installed rollup."""

    def __init__(self, rollup: Path, project_root: Path) -> None:
        """Create the bundler.

        Args:
            rollup: Path to the rollup executable
            project_root: Root whose node_modules provides rollup plugins; scratch
                space is created beneath it so plugin imports resolve
        """
        self._rollup = rollup
        self._project_root = project_root
        self._work_dir = project_root / ".polyrepo"

    async def generate(self, descriptors: Sequence[BundleDescriptor]) -> list[BundleResult]:
        if not descriptors:
            return []

        self._work_dir.mkdir(parents=True, exist_ok=True)
        config_dir = Path(tempfile.mkdtemp(prefix="config-", dir=self._work_dir))
        workspaces = [
            Path(tempfile.mkdtemp(prefix=_UNSAFE_NAME.sub("-", d.lane) + "-", dir=self._work_dir))
            for d in descriptors
        ]
        try:
            config_path = _write_config(config_dir, descriptors, workspaces)
            stderr = await self._run(config_path)
        except BaseException:
            for workspace in workspaces:
                shutil.rmtree(workspace, ignore_errors=True)
            raise
        finally:
            shutil.rmtree(config_dir, ignore_errors=True)

        warnings = _collect_warnings(stderr, len(descriptors))
        return [
            BundleResult(descriptor, _read_chunks(workspace), warnings=found, workspace=workspace)
            for descriptor, workspace, found in zip(descriptors, workspaces, warnings, strict=True)
        ]

    async def _run(self, config_path: Path) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                str(self._rollup),
                "-c",
                str(config_path),
                cwd=self._project_root,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise BundleError(f"Bundler not found: {self._rollup}") from e

        stdout, stderr = await process.communicate()
        stderr_text = stderr.decode("utf-8", errors="replace")
        if process.returncode != 0:
            detail = stderr_text.strip() or stdout.decode("utf-8", errors="replace").strip()
            raise BundleError(f"rollup exited with status {process.returncode}\n{detail}")
        return stderr_text


def _write_config(
    config_dir: Path, descriptors: Sequence[BundleDescriptor], workspaces: Sequence[Path]
) -> Path:
    indexes: dict[tuple[str, str], int] = {}
    references: list[PluginReference] = []
    for descriptor in descriptors:
        for plugin in descriptor.plugins:
            key = (plugin.module, plugin.export)
            if key not in indexes:
                indexes[key] = len(references)
                references.append(plugin)

    imports = []
    for index, reference in enumerate(references):
        module = json.dumps(reference.module)
        if reference.export == "default":
            imports.append(f"import plugin{index} from {module};")
        else:
            imports.append(f"import {{ {reference.export} as plugin{index} }} from {module};")

    batch = [
        {
            "input": str(descriptor.input),
            "file": str(workspace / descriptor.output_file.name),
            "sourcemap": descriptor.source_map,
            "external": descriptor.external.to_config(),
            "plugins": [
                {"index": indexes[(plugin.module, plugin.export)], "options": plugin.options}
                for plugin in descriptor.plugins
            ],
            "suppressedWarnings": sorted(descriptor.suppressed_warnings),
        }
        for descriptor, workspace in zip(descriptors, workspaces, strict=True)
    ]
    (config_dir / "batch.json").write_text(json.dumps(batch, indent=2), encoding="utf-8")

    config_path = config_dir / "rollup.config.mjs"
    config_path.write_text(
        CONFIG_TEMPLATE.format(
            imports="\n".join(imports),
            plugin_names=", ".join(f"plugin{index}" for index in range(len(references))),
            marker=json.dumps(WARNING_MARKER),
        ),
        encoding="utf-8",
    )
    return config_path


def _collect_warnings(stderr: str, count: int) -> list[list[str]]:
    warnings: list[list[str]] = [[] for _ in range(count)]
    for line in stderr.splitlines():
        if not line.startswith(WARNING_MARKER):
            if line.strip():
                logger.debug("rollup: %s", line)
            continue
        payload = json.loads(line[len(WARNING_MARKER) :])
        code = payload["code"]
        message = payload["message"]
        warnings[payload["index"]].append(f"({code}) {message}" if code else message)
    return warnings


def _read_chunks(workspace: Path) -> list[OutputChunk]:
    chunks: list[OutputChunk] = []
    for path in sorted(workspace.iterdir()):
        if path.suffix == ".map" or not path.is_file():
            continue
        map_path = path.with_name(path.name + ".map")
        chunks.append(
            OutputChunk(
                file_name=path.name,
                code=path.read_text(encoding="utf-8"),
                source_map=map_path.read_text(encoding="utf-8") if map_path.is_file() else None,
            )
        )
    return chunks
