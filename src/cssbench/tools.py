"""Tool descriptors and the built-in benchmark suites.

A tool is a name, a display label and an argv template.  Templates use
``{placeholder}`` tokens that are filled in per fixture size:

- ``{input}``  the fixture of the tool's ``input`` kind
- ``{output}`` the discard sink (``os.devnull``)
- ``{stylesheet}``, ``{ruleset}``, ``{content}``, ``{built}``  any
  fixture kind by name

A suite groups the tools that are compared against each other, the
fixture kinds they need, an optional companion build step and the file
its results are written to.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from cssbench.timing import render_command

KIND_STYLESHEET = "stylesheet"
KIND_RULESET = "ruleset"
KIND_CONTENT = "content"
KIND_BUILT = "built"

FIXTURE_KINDS = (KIND_STYLESHEET, KIND_RULESET, KIND_CONTENT, KIND_BUILT)
PLACEHOLDERS = frozenset(("input", "output") + FIXTURE_KINDS)


# ---------------------------------------------------------------------------
# ToolInvocation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolInvocation:
    """How to invoke one competing tool."""

    name: str
    command: tuple[str, ...]
    label: str = ""
    input: str = KIND_STYLESHEET

    @property
    def display_name(self) -> str:
        return self.label or self.name

    @property
    def executable(self) -> str:
        return self.command[0] if self.command else ""

    def argv(self, paths: Mapping[str, str | Path], output: str | Path) -> list[str]:
        """Build the concrete argument vector for one fixture size.

        Args:
            paths: Fixture kind -> file path for the size being run.
            output: Path the tool writes its result to.

        Raises:
            ValueError: If the input kind or a placeholder is not available.
        """
        if self.input not in paths:
            raise ValueError(f"Tool '{self.name}' needs a '{self.input}' fixture.")
        values: dict[str, str | Path] = dict(paths)
        values["input"] = paths[self.input]
        values["output"] = output
        return render_command(self.command, values)

    def reading(self, kind: str) -> ToolInvocation:
        """Return a copy of this tool bound to another input kind."""
        return replace(self, input=kind)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON/YAML-compatible dict (sparse: omits defaults)."""
        d: dict[str, Any] = {"name": self.name, "command": list(self.command)}
        if self.label:
            d["label"] = self.label
        if self.input != KIND_STYLESHEET:
            d["input"] = self.input
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ToolInvocation:
        """Deserialize from a dict.

        ``command`` may be a list of tokens or a single string, which
        is split with shell rules (but never executed through a shell).
        """
        import shlex

        command = data.get("command")
        if isinstance(command, str):
            tokens = shlex.split(command)
        elif isinstance(command, list):
            tokens = [str(t) for t in command]
        else:
            raise ValueError(f"Tool '{data.get('name', '?')}' needs a 'command' list or string.")
        return cls(
            name=str(data["name"]),
            command=tuple(tokens),
            label=str(data.get("label", "")),
            input=str(data.get("input", KIND_STYLESHEET)),
        )


# ---------------------------------------------------------------------------
# Suite
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Suite:
    """A group of tools compared on the same fixtures."""

    name: str
    title: str
    tools: tuple[ToolInvocation, ...] = ()
    kinds: tuple[str, ...] = (KIND_STYLESHEET,)
    build: ToolInvocation | None = None  # writes the {built} fixture
    results_file: str = ""

    @property
    def results_filename(self) -> str:
        return self.results_file or f"benchmark-{self.name}-results.json"

    @property
    def labels(self) -> dict[str, str]:
        """Tool name -> display label, in tool order."""
        return {t.name: t.display_name for t in self.tools}

    @property
    def fixture_kinds(self) -> tuple[str, ...]:
        """Every fixture kind this suite reads, build output included."""
        kinds = list(self.kinds)
        if self.build is not None and KIND_BUILT not in kinds:
            kinds.append(KIND_BUILT)
        return tuple(kinds)

    def with_tools(self, tools: tuple[ToolInvocation, ...]) -> Suite:
        return replace(self, tools=tools)


def _npx(package: str, *args: str) -> tuple[str, ...]:
    return ("npx", "--yes", package) + args


ZCSS = ToolInvocation(
    name="zcss",
    label="zcss",
    command=("./zig-out/bin/zcss", "{input}", "-o", "{output}", "--minify", "--optimize"),
)
LIGHTNINGCSS = ToolInvocation(
    name="lightningcss",
    label="LightningCSS",
    command=_npx("lightningcss-cli", "{input}", "--minify", "-o", "{output}"),
)
CSSNANO = ToolInvocation(
    name="cssnano",
    label="cssnano",
    command=_npx("cssnano-cli", "{input}", "{output}"),
)
ESBUILD = ToolInvocation(
    name="esbuild",
    label="esbuild",
    command=_npx(
        "esbuild", "{input}", "--bundle", "--loader:.css=css", "--minify", "--outfile={output}"
    ),
)
POSTCSS = ToolInvocation(
    name="postcss",
    label="PostCSS",
    command=_npx("postcss-cli", "{input}", "-o", "{output}", "--no-map"),
)
SASS = ToolInvocation(
    name="sass",
    label="Sass",
    command=_npx("sass", "{input}", "{output}", "--style=compressed", "--no-source-map"),
)
LESS = ToolInvocation(
    name="less",
    label="Less",
    command=_npx("lessc", "{input}", "{output}", "--compress"),
)
STYLUS = ToolInvocation(
    name="stylus",
    label="Stylus",
    command=_npx("stylus", "{input}", "-o", "{output}", "--compress"),
)
TAILWIND = ToolInvocation(
    name="tailwind",
    label="Tailwind (build)",
    input=KIND_RULESET,
    command=_npx(
        "tailwindcss-cli",
        "build",
        "-i",
        "{ruleset}",
        "-o",
        "{output}",
        "--purge",
        "{content}",
        "--minify",
    ),
)
# Same invocation, but keeping the output as the {built} fixture.
TAILWIND_BUILD = ToolInvocation(
    name="tailwind-build",
    label="Tailwind (build)",
    input=KIND_RULESET,
    command=_npx(
        "tailwindcss-cli",
        "build",
        "-i",
        "{ruleset}",
        "-o",
        "{built}",
        "--purge",
        "{content}",
        "--minify",
    ),
)

COMPETITORS = Suite(
    name="competitors",
    title="CSS",
    tools=(ZCSS, LIGHTNINGCSS, CSSNANO, ESBUILD, POSTCSS, SASS, LESS, STYLUS),
    kinds=(KIND_STYLESHEET,),
    results_file="benchmark-results.json",
)

# Post-processors timed on Tailwind's own output.
TAILWIND_SUITE = Suite(
    name="tailwind",
    title="Tailwind CSS",
    tools=(
        TAILWIND,
        LIGHTNINGCSS.reading(KIND_BUILT),
        CSSNANO.reading(KIND_BUILT),
        ESBUILD.reading(KIND_BUILT),
    ),
    kinds=(KIND_RULESET, KIND_CONTENT),
    build=TAILWIND_BUILD,
    results_file="benchmark-tailwind-results.json",
)

BUILTIN_SUITES: dict[str, Suite] = {
    COMPETITORS.name: COMPETITORS,
    TAILWIND_SUITE.name: TAILWIND_SUITE,
}
