"""Input fixtures for benchmark runs.

Every size class gets one payload per fixture kind:

- ``stylesheet``: plain CSS fed to the compilers and minifiers.
- ``ruleset``: the directive file a utility-class framework expands.
- ``content``: markup listing the utility classes the framework must
  resolve.
- ``built``: the framework's own output, produced by the suite's
  companion build before measurement starts.

Fixtures are written once to fixed file names, read by every tool, and
removed at the end of the run.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Iterator

from cssbench.logging import get_logger
from cssbench.results import Sample
from cssbench.timing import time_command
from cssbench.tools import (
    KIND_BUILT,
    KIND_CONTENT,
    KIND_RULESET,
    KIND_STYLESHEET,
    Suite,
)

if TYPE_CHECKING:
    from cssbench.config import BenchConfig

log = get_logger("fixtures")


class BaselineAssetError(RuntimeError):
    """A fixture every tool depends on could not be produced."""


SMALL_STYLESHEET = ".container { color: red; background: white; padding: 10px; margin: 5px; }"
RULESET = "@tailwind base; @tailwind components; @tailwind utilities;"
CONTAINER_OPEN = '<div class="container mx-auto p-4 bg-white text-black">'
SMALL_CONTENT = CONTAINER_OPEN + "</div>"

CLASS_VOCABULARY = (
    "flex", "grid", "hidden", "block", "inline", "inline-block",
    "w-full", "h-full", "w-1/2", "h-1/2", "w-1/3", "h-1/3",
    "p-2", "p-4", "p-6", "m-2", "m-4", "m-6",
    "bg-blue-500", "bg-red-500", "bg-green-500", "bg-yellow-500",
    "text-white", "text-black", "text-gray-500", "text-blue-500",
    "rounded", "rounded-lg", "rounded-xl", "shadow", "shadow-lg",
    "border", "border-2", "border-gray-300", "border-blue-500",
    "hover:bg-blue-600", "focus:outline-none", "active:scale-95",
    "transition", "duration-300", "ease-in-out",
)  # fmt: skip
CLASSES_PER_ELEMENT = 5

SPACING = (
    "p-1", "p-2", "p-3", "p-4", "p-5", "p-6", "p-8", "p-10", "p-12",
    "m-1", "m-2", "m-3", "m-4", "m-5", "m-6", "m-8", "m-10", "m-12",
)  # fmt: skip
COLORS = ("bg-red", "bg-blue", "bg-green", "bg-yellow", "bg-purple", "bg-pink", "bg-indigo", "bg-gray")
SHADES = ("50", "100", "200", "300", "400", "500", "600", "700", "800", "900")
SIZING = (
    "w-1", "w-2", "w-4", "w-8", "w-12", "w-16", "w-20", "w-24", "w-32", "w-48", "w-64", "w-full",
    "h-1", "h-2", "h-4", "h-8", "h-12", "h-16", "h-20", "h-24", "h-32", "h-48", "h-64", "h-full",
)  # fmt: skip
UTILITIES = (
    "flex", "grid", "hidden", "block", "rounded", "shadow", "border",
    "hover:scale-105", "transition", "duration-300",
)  # fmt: skip

_COLOR_SPACE = 0x1000000


# ---------------------------------------------------------------------------
# Fixture / FixtureSet
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Fixture:
    """One generated input file."""

    size: str
    kind: str
    path: Path
    payload: str

    @property
    def byte_size(self) -> int:
        return len(self.payload.encode("utf-8"))


@dataclass
class FixtureSet:
    """Fixtures of one run, by size (smallest first) and kind.

    ``created`` lists every path written or attempted, so cleanup can
    run even after a failed materialization.
    """

    sizes: list[str] = field(default_factory=list)
    fixtures: dict[str, dict[str, Fixture]] = field(default_factory=dict)
    created: list[Path] = field(default_factory=list)

    def add(self, fixture: Fixture) -> None:
        if fixture.size not in self.fixtures:
            self.sizes.append(fixture.size)
            self.fixtures[fixture.size] = {}
        self.fixtures[fixture.size][fixture.kind] = fixture

    def paths_for(self, size: str) -> dict[str, Path]:
        """Fixture kind -> path for one size."""
        return {kind: fx.path for kind, fx in self.fixtures.get(size, {}).items()}

    def get(self, size: str, kind: str) -> Fixture | None:
        return self.fixtures.get(size, {}).get(kind)

    @property
    def smallest(self) -> str:
        if not self.sizes:
            raise ValueError("Fixture set is empty.")
        return self.sizes[0]

    def __iter__(self) -> Iterator[Fixture]:
        for size in self.sizes:
            yield from self.fixtures[size].values()


# ---------------------------------------------------------------------------
# Payload generators
# ---------------------------------------------------------------------------


def large_stylesheet(rule_count: int) -> str:
    """Build ``rule_count`` independent rules, each derived from its index.

    A pure function of the index: two calls with the same count return
    identical text.
    """
    lines = []
    for i in range(rule_count):
        color = (i * 1000) % _COLOR_SPACE
        lines.append(
            f".class-{i} {{ color: #{color:06x}; padding: {i * 2}px; margin: {i * 3}px; }}\n"
        )
    return "".join(lines)


def generate_stylesheet(size: str, *, reference: Path, rule_count: int = 1000) -> str:
    """Return the stylesheet payload for a size class.

    Raises:
        BaselineAssetError: If the medium reference stylesheet is missing.
    """
    if size == "small":
        return SMALL_STYLESHEET
    if size == "medium":
        try:
            return reference.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise BaselineAssetError(
                f"Reference stylesheet for the medium fixture not found: {reference}"
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise BaselineAssetError(
                f"Cannot read reference stylesheet {reference}: {exc}"
            ) from exc
    if size == "large":
        return large_stylesheet(rule_count)
    raise ValueError(f"Unknown fixture size '{size}'.")


def generate_ruleset(size: str) -> str:
    """Return the framework directive file.  Identical for every size."""
    return RULESET


def _flat_classes(rng: random.Random) -> str:
    return " ".join(rng.sample(CLASS_VOCABULARY, CLASSES_PER_ELEMENT))


def _grouped_classes(rng: random.Random) -> str:
    parts = []
    if rng.random() > 0.5:
        parts.append(rng.choice(SPACING))
    if rng.random() > 0.5:
        parts.append(f"{rng.choice(COLORS)}-{rng.choice(SHADES)}")
    if rng.random() > 0.5:
        parts.append(rng.choice(SIZING))
    if rng.random() > 0.5:
        parts.append(rng.choice(UTILITIES))
    return " ".join(parts)


def generate_content(size: str, *, elements: int = 0, seed: int | None = 0) -> str:
    """Return the markup the framework scans for utility classes.

    The medium fixture samples a fixed number of classes from one flat
    vocabulary per element; the large one draws optional tokens from
    several groups.  Pass ``seed=None`` for unseeded content.
    """
    if size == "small":
        return SMALL_CONTENT
    if size not in ("medium", "large"):
        raise ValueError(f"Unknown fixture size '{size}'.")

    rng = random.Random(seed)
    pick = _flat_classes if size == "medium" else _grouped_classes
    parts = [CONTAINER_OPEN]
    for i in range(elements):
        parts.append(f'<div class="{pick(rng)}">Item {i}</div>')
    parts.append("</div>")
    return "".join(parts)


# ---------------------------------------------------------------------------
# Fixed file names
# ---------------------------------------------------------------------------


def fixture_filename(size: str, kind: str) -> str:
    """The fixed name a fixture is written to."""
    if kind == KIND_STYLESHEET:
        return f"bench-{size}.css"
    if kind == KIND_RULESET:
        return f"bench-tailwind-{size}.css"
    if kind == KIND_CONTENT:
        return f"bench-tailwind-{size}.html"
    if kind == KIND_BUILT:
        return f"bench-tailwind-{size}-out.css"
    raise ValueError(f"Unknown fixture kind '{kind}'.")


def generate(size: str, kind: str, *, config: BenchConfig) -> Fixture:
    """Generate (but do not write) one fixture."""
    if kind == KIND_STYLESHEET:
        payload = generate_stylesheet(
            size,
            reference=config.reference_stylesheet,
            rule_count=config.large_rule_count,
        )
    elif kind == KIND_RULESET:
        payload = generate_ruleset(size)
    elif kind == KIND_CONTENT:
        payload = generate_content(
            size,
            elements=config.content_elements.get(size, 0),
            seed=config.seed,
        )
    else:
        raise ValueError(f"Fixture kind '{kind}' is not generated directly.")
    return Fixture(
        size=size,
        kind=kind,
        path=config.work_dir / fixture_filename(size, kind),
        payload=payload,
    )


# ---------------------------------------------------------------------------
# Materialization
# ---------------------------------------------------------------------------


BuildRunner = Callable[..., Sample]


def materialize(
    suites: Iterable[Suite],
    config: BenchConfig,
    *,
    fixtures: FixtureSet | None = None,
    timer: BuildRunner = time_command,
) -> FixtureSet:
    """Write every fixture the suites need and run their companion builds.

    Pass an empty *fixtures* to keep track of created files even when
    this raises.

    Raises:
        BaselineAssetError: If a reference input is missing or a
            companion build leaves no output file.
    """
    fs = fixtures if fixtures is not None else FixtureSet()
    suites = list(suites)
    kinds: list[str] = []
    for suite in suites:
        for kind in suite.kinds:
            if kind != KIND_BUILT and kind not in kinds:
                kinds.append(kind)

    config.work_dir.mkdir(parents=True, exist_ok=True)

    for size in config.sizes:
        for kind in kinds:
            fixture = generate(size, kind, config=config)
            fs.created.append(fixture.path)
            fixture.path.write_text(fixture.payload, encoding="utf-8")
            fs.add(fixture)
            log.debug("Wrote %s (%d bytes)", fixture.path, fixture.byte_size)

    for suite in suites:
        if suite.build is None:
            continue
        for size in config.sizes:
            fs.add(build_companion(suite, size, fs, config=config, timer=timer))

    return fs


def build_companion(
    suite: Suite,
    size: str,
    fixtures: FixtureSet,
    *,
    config: BenchConfig,
    timer: BuildRunner = time_command,
) -> Fixture:
    """Run a suite's build step for one size and return its output fixture.

    Raises:
        BaselineAssetError: If the build leaves no output file.
    """
    if suite.build is None:
        raise ValueError(f"Suite '{suite.name}' has no build step.")
    target = config.work_dir / fixture_filename(size, KIND_BUILT)
    fixtures.created.append(target)

    paths: dict[str, str | Path] = dict(fixtures.paths_for(size))
    paths[KIND_BUILT] = target
    argv = suite.build.argv(paths, output=target)

    # Output left over from an interrupted run must not pass for this build.
    try:
        target.unlink()
    except FileNotFoundError:
        pass

    log.info("Building %s fixture for %s...", suite.title, size)
    sample = timer(argv, timeout_ms=config.timeout_ms)
    if not sample.ok:
        log.warning("%s build for %s finished with status %s", suite.title, size, sample.status)

    if not target.exists():
        raise BaselineAssetError(
            f"{suite.title} build did not produce {target}; cannot compare tools "
            f"without it."
        )

    return Fixture(
        size=size,
        kind=KIND_BUILT,
        path=target,
        payload=target.read_text(encoding="utf-8", errors="replace"),
    )
