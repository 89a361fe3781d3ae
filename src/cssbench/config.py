"""Benchmark configuration and profile loading.

Handles:
- Loading benchmark profiles from YAML files.
- Parsing inline tool definitions from CLI arguments.
- Merging CLI options with profile defaults.
- Validating the final configuration before execution.
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cssbench.timing import placeholders
from cssbench.tools import (
    BUILTIN_SUITES,
    FIXTURE_KINDS,
    KIND_STYLESHEET,
    PLACEHOLDERS,
    Suite,
    ToolInvocation,
)

log = logging.getLogger("cssbench")

SIZES = ("small", "medium", "large")


# ---------------------------------------------------------------------------
# BenchConfig
# ---------------------------------------------------------------------------


@dataclass
class BenchConfig:
    """Resolved configuration for a benchmark run."""

    name: str = ""

    # Suites to run, in order.
    suites: dict[str, Suite] = field(default_factory=lambda: dict(BUILTIN_SUITES))

    # Iteration control (identical for every tool and size).
    iterations: int = 10
    warmup: int = 2
    timeout_ms: int = 30_000

    # Fixtures
    sizes: tuple[str, ...] = SIZES
    reference_stylesheet: Path = field(default_factory=lambda: Path("test.css"))
    large_rule_count: int = 1000
    content_elements: dict[str, int] = field(
        default_factory=lambda: {"medium": 50, "large": 500},
    )
    seed: int | None = 0  # None = unseeded content fixtures

    # Paths
    work_dir: Path = field(default_factory=lambda: Path("."))
    results_dir: Path = field(default_factory=lambda: Path("."))
    save_samples: bool = False

    def results_path(self, suite: Suite) -> Path:
        """Where the aggregated document of *suite* is written."""
        return self.results_dir / suite.results_filename

    def samples_path(self, suite: Suite) -> Path:
        """Where the raw samples of *suite* are written."""
        return self.results_dir / (Path(suite.results_filename).stem + "-samples.json")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: BenchConfig) -> list[ValidationError]:
    """Validate a benchmark configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if config.iterations < 1:
        errors.append(
            ValidationError(
                field="iterations",
                message=f"Need at least 1 measured iteration (got {config.iterations}).",
            )
        )
    elif config.iterations < 3:
        errors.append(
            ValidationError(
                field="iterations",
                message=(
                    f"Fewer than 3 measured iterations ({config.iterations}); "
                    f"means will be noisy."
                ),
                severity="warning",
            )
        )

    if config.warmup < 0:
        errors.append(
            ValidationError(
                field="warmup",
                message=f"Warmup iterations cannot be negative (got {config.warmup}).",
            )
        )

    if config.timeout_ms <= 0:
        errors.append(
            ValidationError(
                field="timeout_ms",
                message=f"Timeout must be positive (got {config.timeout_ms}).",
            )
        )

    if config.large_rule_count < 1:
        errors.append(
            ValidationError(
                field="large_rule_count",
                message=f"Large fixture needs at least one rule (got {config.large_rule_count}).",
            )
        )

    if not config.sizes:
        errors.append(ValidationError(field="sizes", message="No fixture sizes selected."))
    for size in config.sizes:
        if size not in SIZES:
            errors.append(
                ValidationError(
                    field="sizes",
                    message=f"Unknown fixture size '{size}'. Valid sizes: {', '.join(SIZES)}",
                )
            )

    if not config.suites:
        errors.append(
            ValidationError(
                field="suites",
                message="No benchmark suites selected. Use --suite or a profile.",
            )
        )

    for suite_name, suite in config.suites.items():
        errors.extend(_validate_suite(suite_name, suite))

    return errors


def _validate_suite(suite_name: str, suite: Suite) -> list[ValidationError]:
    errors: list[ValidationError] = []
    prefix = f"suites.{suite_name}"

    if not suite.tools:
        errors.append(
            ValidationError(field=prefix, message=f"Suite '{suite_name}' has no tools.")
        )

    seen: set[str] = set()
    available = set(suite.fixture_kinds)
    tools = list(suite.tools)
    if suite.build is not None:
        tools.append(suite.build)

    for tool in tools:
        tool_field = f"{prefix}.{tool.name}"
        if not tool.name or not tool.name.strip():
            errors.append(ValidationError(field=prefix, message="Tool names must be non-empty."))
        if tool is not suite.build:
            if tool.name in seen:
                errors.append(
                    ValidationError(
                        field=tool_field,
                        message=f"Duplicate tool '{tool.name}' in suite '{suite_name}'.",
                    )
                )
            seen.add(tool.name)
        if not tool.command:
            errors.append(
                ValidationError(field=tool_field, message=f"Tool '{tool.name}' has no command.")
            )
            continue
        if tool.input not in available:
            errors.append(
                ValidationError(
                    field=tool_field,
                    message=(
                        f"Tool '{tool.name}' reads '{tool.input}' but suite '{suite_name}' "
                        f"provides: {', '.join(sorted(available))}"
                    ),
                )
            )
        unknown = placeholders(tool.command) - PLACEHOLDERS
        if unknown:
            errors.append(
                ValidationError(
                    field=tool_field,
                    message=(
                        f"Tool '{tool.name}' uses unknown placeholder(s): "
                        f"{', '.join('{' + u + '}' for u in sorted(unknown))}"
                    ),
                )
            )
        missing_kinds = (placeholders(tool.command) & set(FIXTURE_KINDS)) - available
        if missing_kinds:
            errors.append(
                ValidationError(
                    field=tool_field,
                    message=(
                        f"Tool '{tool.name}' references fixture(s) not provided by suite "
                        f"'{suite_name}': {', '.join(sorted(missing_kinds))}"
                    ),
                )
            )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a benchmark profile from a YAML file.

    Profile format::

        name: "compilers on CI"
        iterations: 10
        warmup: 2
        timeout_ms: 30000
        seed: 0
        reference_stylesheet: test.css
        large_rule_count: 1000
        content_elements: {medium: 50, large: 500}
        sizes: [small, medium, large]

        suites:
          competitors:              # built-in suite, used as-is
          mine:
            title: "My tools"
            results_file: mine.json
            kinds: [stylesheet]
            tools:
              - name: zcss
                command: ["./zig-out/bin/zcss", "{input}", "-o", "{output}"]

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text())

    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    log.debug("Loaded profile %s (%d keys)", profile_path, len(data))
    return data


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> BenchConfig:
    """Build a BenchConfig from a parsed YAML profile.

    CLI overrides take precedence over profile values.  Keys match
    BenchConfig field names; a value of None means "not given".
    """
    cli = {k: v for k, v in (cli_overrides or {}).items() if v is not None}

    def pick(key: str, default: Any) -> Any:
        if key in cli:
            return cli[key]
        return profile_data.get(key, default)

    config = BenchConfig(
        name=pick("name", ""),
        iterations=int(pick("iterations", 10)),
        warmup=int(pick("warmup", 2)),
        timeout_ms=int(pick("timeout_ms", 30_000)),
        large_rule_count=int(pick("large_rule_count", 1000)),
        reference_stylesheet=Path(pick("reference_stylesheet", "test.css")),
        work_dir=Path(pick("work_dir", ".")),
        results_dir=Path(pick("results_dir", ".")),
    )

    if "seed" in cli:
        config.seed = cli["seed"]
    elif "seed" in profile_data:
        seed = profile_data["seed"]
        config.seed = None if seed is None else int(seed)

    sizes = pick("sizes", None)
    if sizes is not None:
        config.sizes = tuple(str(s) for s in sizes)

    elements = profile_data.get("content_elements")
    if elements is not None:
        if not isinstance(elements, dict):
            raise ValueError("Profile 'content_elements' must be a mapping of size -> count")
        config.content_elements.update({str(k): int(v) for k, v in elements.items()})

    suites_data = profile_data.get("suites")
    if suites_data is not None:
        config.suites = _suites_from_profile(suites_data)

    return config


def _suites_from_profile(suites_data: Any) -> dict[str, Suite]:
    if isinstance(suites_data, list):
        suites_data = {name: None for name in suites_data}
    if not isinstance(suites_data, dict):
        raise ValueError("Profile 'suites' must be a mapping of suite_name -> definition")

    suites: dict[str, Suite] = {}
    for name, suite_data in suites_data.items():
        builtin = BUILTIN_SUITES.get(name)
        if suite_data is None:
            if builtin is None:
                raise ValueError(
                    f"Suite '{name}' is not built in; give it a definition with tools."
                )
            suites[name] = builtin
            continue
        if not isinstance(suite_data, dict):
            raise ValueError(f"Suite '{name}' must be a mapping, got {type(suite_data).__name__}")

        tools_data = suite_data.get("tools")
        if tools_data is None and builtin is not None:
            tools = builtin.tools
        else:
            if not isinstance(tools_data, list):
                raise ValueError(f"Suite '{name}' needs a 'tools' list.")
            tools = tuple(ToolInvocation.from_dict(t) for t in tools_data)

        build_data = suite_data.get("build")
        build = builtin.build if builtin is not None else None
        if build_data is not None:
            build = ToolInvocation.from_dict({"name": f"{name}-build", **build_data})

        suites[name] = Suite(
            name=name,
            title=str(suite_data.get("title", builtin.title if builtin else name)),
            tools=tools,
            kinds=tuple(
                suite_data.get("kinds", builtin.kinds if builtin else (KIND_STYLESHEET,))
            ),
            build=build,
            results_file=str(
                suite_data.get("results_file", builtin.results_file if builtin else "")
            ),
        )
    return suites


# ---------------------------------------------------------------------------
# Inline tool parsing
# ---------------------------------------------------------------------------


def parse_inline_tool(spec: str) -> ToolInvocation:
    """Parse an inline tool definition from the CLI.

    Format: ``"name:command tokens"`` or ``"name@kind:command tokens"``.
    The command is split with shell quoting rules but never run through
    a shell.

    Examples::

        "zcss:./zig-out/bin/zcss {input} -o {output} --minify"
        "csso@built:npx --yes csso-cli {input} -o {output}"
    """
    if ":" not in spec:
        raise ValueError(f"Invalid tool spec: '{spec}'. Expected format: 'name:command ...'")

    name, rest = spec.split(":", 1)
    name = name.strip()
    kind = KIND_STYLESHEET
    if "@" in name:
        name, kind = (part.strip() for part in name.split("@", 1))
    if not name:
        raise ValueError("Tool name cannot be empty.")
    if kind not in FIXTURE_KINDS:
        raise ValueError(
            f"Unknown input kind '{kind}' for tool '{name}'. Valid kinds: {', '.join(FIXTURE_KINDS)}"
        )

    tokens = shlex.split(rest)
    if not tokens:
        raise ValueError(f"Tool '{name}' has an empty command.")

    return ToolInvocation(name=name, command=tuple(tokens), input=kind)


def select_suites(config: BenchConfig, names: list[str]) -> None:
    """Restrict *config* to the named suites, keeping their given order."""
    selected: dict[str, Suite] = {}
    for name in names:
        suite = config.suites.get(name) or BUILTIN_SUITES.get(name)
        if suite is None:
            available = sorted(set(config.suites) | set(BUILTIN_SUITES))
            raise ValueError(f"Unknown suite '{name}'. Available: {', '.join(available)}")
        selected[name] = suite
    config.suites = selected


def add_tool(config: BenchConfig, tool: ToolInvocation, suite_name: str | None = None) -> None:
    """Append *tool* to a suite (the first one when *suite_name* is None)."""
    if not config.suites:
        raise ValueError("No suite to add the tool to.")
    name = suite_name or next(iter(config.suites))
    suite = config.suites[name]
    config.suites[name] = suite.with_tools(suite.tools + (tool,))


def quick_config(config: BenchConfig) -> BenchConfig:
    """Apply quick mode settings for rapid iteration.

    Reduces iterations to 3 and warmup to 0.
    """
    config.iterations = 3
    config.warmup = 0
    config.name = f"{config.name} (quick)" if config.name else "Quick benchmark"
    return config
