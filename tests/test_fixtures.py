"""Tests for cssbench.fixtures: fixture generation and companion builds."""

from __future__ import annotations

import re
import shutil
import tempfile
import unittest
from pathlib import Path

from cssbench.config import BenchConfig
from cssbench.fixtures import (
    CLASS_VOCABULARY,
    CLASSES_PER_ELEMENT,
    RULESET,
    SMALL_CONTENT,
    SMALL_STYLESHEET,
    BaselineAssetError,
    Fixture,
    FixtureSet,
    build_companion,
    fixture_filename,
    generate,
    generate_content,
    generate_ruleset,
    generate_stylesheet,
    large_stylesheet,
    materialize,
)
from cssbench.tools import (
    COMPETITORS,
    KIND_BUILT,
    KIND_CONTENT,
    KIND_RULESET,
    KIND_STYLESHEET,
    Suite,
    ToolInvocation,
)

from bench_test_helpers import make_suite


CP = shutil.which("cp") or "/bin/cp"
TRUE = shutil.which("true") or "/bin/true"
FALSE = shutil.which("false") or "/bin/false"


def _tailwind_like(build_command: tuple[str, ...]) -> Suite:
    return Suite(
        name="fw",
        title="Framework",
        tools=(ToolInvocation(name="post", command=("post", "{input}"), input=KIND_BUILT),),
        kinds=(KIND_RULESET, KIND_CONTENT),
        build=ToolInvocation(name="fw-build", command=build_command, input=KIND_RULESET),
        results_file="fw.json",
    )


# ---------------------------------------------------------------------------
# Stylesheet payloads
# ---------------------------------------------------------------------------


class TestStylesheet(unittest.TestCase):
    """Tests for stylesheet payloads per size class."""

    def test_small_is_fixed_literal(self) -> None:
        payload = generate_stylesheet("small", reference=Path("/nonexistent"))
        self.assertEqual(payload, SMALL_STYLESHEET)

    def test_medium_reads_reference(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            ref = Path(tmpdir) / "test.css"
            ref.write_text("body { margin: 0 }\n")
            self.assertEqual(
                generate_stylesheet("medium", reference=ref),
                "body { margin: 0 }\n",
            )

    def test_medium_missing_reference_is_fatal(self) -> None:
        with self.assertRaises(BaselineAssetError):
            generate_stylesheet("medium", reference=Path("/nonexistent/test.css"))

    def test_unreadable_reference_is_fatal(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(BaselineAssetError):
                generate_stylesheet("medium", reference=Path(tmpdir))

    def test_large_rule_count(self) -> None:
        payload = generate_stylesheet("large", reference=Path("x"), rule_count=250)
        self.assertEqual(payload.count("\n"), 250)

    def test_unknown_size(self) -> None:
        with self.assertRaises(ValueError):
            generate_stylesheet("huge", reference=Path("x"))


class TestLargeStylesheet(unittest.TestCase):
    """Tests for the index-derived large fixture."""

    def test_deterministic(self) -> None:
        self.assertEqual(large_stylesheet(1000), large_stylesheet(1000))

    def test_first_rules(self) -> None:
        lines = large_stylesheet(3).splitlines()
        self.assertEqual(lines[0], ".class-0 { color: #000000; padding: 0px; margin: 0px; }")
        self.assertEqual(lines[1], ".class-1 { color: #0003e8; padding: 2px; margin: 3px; }")
        self.assertEqual(lines[2], ".class-2 { color: #0007d0; padding: 4px; margin: 6px; }")

    def test_scales_linearly(self) -> None:
        self.assertEqual(len(large_stylesheet(100).splitlines()), 100)
        self.assertEqual(len(large_stylesheet(2000).splitlines()), 2000)

    def test_colors_stay_six_hex_digits(self) -> None:
        for line in large_stylesheet(20000).splitlines()[-5:]:
            self.assertRegex(line, r"color: #[0-9a-f]{6};")

    def test_about_100kb_by_default(self) -> None:
        size = len(large_stylesheet(1000).encode())
        self.assertGreater(size, 50_000)
        self.assertLess(size, 150_000)


# ---------------------------------------------------------------------------
# Ruleset and content payloads
# ---------------------------------------------------------------------------


class TestRulesetAndContent(unittest.TestCase):
    """Tests for the framework ruleset and scanned markup."""

    def test_ruleset_same_for_all_sizes(self) -> None:
        self.assertEqual(generate_ruleset("small"), RULESET)
        self.assertEqual(generate_ruleset("large"), RULESET)

    def test_small_content_literal(self) -> None:
        self.assertEqual(generate_content("small"), SMALL_CONTENT)

    def test_medium_content_element_count(self) -> None:
        html = generate_content("medium", elements=50, seed=1)
        self.assertEqual(html.count("Item "), 50)
        self.assertTrue(html.startswith('<div class="container mx-auto p-4 bg-white text-black">'))
        self.assertTrue(html.endswith("</div></div>"))

    def test_medium_classes_from_vocabulary(self) -> None:
        html = generate_content("medium", elements=20, seed=3)
        class_lists = re.findall(r'<div class="([^"]*)">Item', html)
        self.assertEqual(len(class_lists), 20)
        for classes in class_lists:
            tokens = classes.split()
            self.assertEqual(len(tokens), CLASSES_PER_ELEMENT)
            self.assertEqual(len(set(tokens)), CLASSES_PER_ELEMENT)
            for token in tokens:
                self.assertIn(token, CLASS_VOCABULARY)

    def test_large_content_at_most_four_tokens(self) -> None:
        html = generate_content("large", elements=500, seed=7)
        class_lists = re.findall(r'<div class="([^"]*)">Item', html)
        self.assertEqual(len(class_lists), 500)
        self.assertTrue(all(len(c.split()) <= 4 for c in class_lists))

    def test_seeded_content_reproducible(self) -> None:
        self.assertEqual(
            generate_content("large", elements=500, seed=42),
            generate_content("large", elements=500, seed=42),
        )

    def test_different_seeds_differ(self) -> None:
        self.assertNotEqual(
            generate_content("medium", elements=50, seed=1),
            generate_content("medium", elements=50, seed=2),
        )

    def test_unknown_size(self) -> None:
        with self.assertRaises(ValueError):
            generate_content("huge", elements=1)


# ---------------------------------------------------------------------------
# File names and generate()
# ---------------------------------------------------------------------------


class TestGenerate(unittest.TestCase):
    """Tests for fixture_filename() and generate()."""

    def test_fixed_filenames(self) -> None:
        self.assertEqual(fixture_filename("small", KIND_STYLESHEET), "bench-small.css")
        self.assertEqual(fixture_filename("large", KIND_RULESET), "bench-tailwind-large.css")
        self.assertEqual(fixture_filename("medium", KIND_CONTENT), "bench-tailwind-medium.html")
        self.assertEqual(fixture_filename("small", KIND_BUILT), "bench-tailwind-small-out.css")

    def test_unknown_kind(self) -> None:
        with self.assertRaises(ValueError):
            fixture_filename("small", "video")

    def test_generate_uses_config(self) -> None:
        config = BenchConfig(work_dir=Path("/tmp/wd"), large_rule_count=10)
        fixture = generate("large", KIND_STYLESHEET, config=config)
        self.assertEqual(fixture.path, Path("/tmp/wd/bench-large.css"))
        self.assertEqual(fixture.payload.count("\n"), 10)
        self.assertEqual(fixture.byte_size, len(fixture.payload.encode()))

    def test_generate_content_uses_element_count(self) -> None:
        config = BenchConfig(content_elements={"medium": 7})
        fixture = generate("medium", KIND_CONTENT, config=config)
        self.assertEqual(fixture.payload.count("Item "), 7)

    def test_built_is_not_generated(self) -> None:
        with self.assertRaises(ValueError):
            generate("small", KIND_BUILT, config=BenchConfig())


# ---------------------------------------------------------------------------
# FixtureSet
# ---------------------------------------------------------------------------


class TestFixtureSet(unittest.TestCase):
    """Tests for the FixtureSet container."""

    def test_sizes_keep_insertion_order(self) -> None:
        fs = FixtureSet()
        fs.add(Fixture("small", KIND_STYLESHEET, Path("s.css"), "a"))
        fs.add(Fixture("large", KIND_STYLESHEET, Path("l.css"), "b"))
        fs.add(Fixture("small", KIND_RULESET, Path("r.css"), "c"))
        self.assertEqual(fs.sizes, ["small", "large"])
        self.assertEqual(fs.smallest, "small")
        self.assertEqual(
            fs.paths_for("small"),
            {KIND_STYLESHEET: Path("s.css"), KIND_RULESET: Path("r.css")},
        )
        self.assertEqual(len(list(fs)), 3)

    def test_empty_has_no_smallest(self) -> None:
        with self.assertRaises(ValueError):
            FixtureSet().smallest


# ---------------------------------------------------------------------------
# materialize / build_companion
# ---------------------------------------------------------------------------


class TestMaterialize(unittest.TestCase):
    """Tests for writing fixtures and running companion builds."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.work_dir = Path(self._tmp.name)
        (self.work_dir / "test.css").write_text("h1 { font-size: 2em }\n")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _config(self, **kwargs: object) -> BenchConfig:
        defaults: dict[str, object] = {
            "work_dir": self.work_dir,
            "reference_stylesheet": self.work_dir / "test.css",
            "timeout_ms": 5000,
        }
        defaults.update(kwargs)
        return BenchConfig(**defaults)  # type: ignore[arg-type]

    def test_writes_stylesheets_to_fixed_paths(self) -> None:
        fs = materialize([COMPETITORS], self._config())
        self.assertEqual(fs.sizes, ["small", "medium", "large"])
        for size in ("small", "medium", "large"):
            path = self.work_dir / f"bench-{size}.css"
            self.assertTrue(path.exists())
            self.assertEqual(path.read_text(), fs.get(size, KIND_STYLESHEET).payload)
        self.assertEqual((self.work_dir / "bench-medium.css").read_text(), "h1 { font-size: 2em }\n")
        self.assertEqual(len(fs.created), 3)

    def test_missing_reference_aborts(self) -> None:
        fs = FixtureSet()
        config = self._config(reference_stylesheet=self.work_dir / "missing.css")
        with self.assertRaises(BaselineAssetError):
            materialize([COMPETITORS], config, fixtures=fs)
        # The small fixture was already written and is tracked for cleanup.
        self.assertIn(self.work_dir / "bench-small.css", fs.created)

    def test_shared_kinds_written_once(self) -> None:
        suites = [make_suite("a", name="one"), make_suite("b", name="two")]
        fs = materialize(suites, self._config(sizes=("small",)))
        self.assertEqual(fs.created, [self.work_dir / "bench-small.css"])

    def test_companion_build_output_becomes_fixture(self) -> None:
        suite = _tailwind_like((CP, "{ruleset}", "{built}"))
        fs = materialize([suite], self._config(sizes=("small", "large")))
        built = fs.get("large", KIND_BUILT)
        self.assertIsNotNone(built)
        self.assertEqual(built.path, self.work_dir / "bench-tailwind-large-out.css")
        self.assertEqual(built.payload, RULESET)
        self.assertIn(built.path, fs.created)
        self.assertTrue((self.work_dir / "bench-tailwind-small.html").exists())

    def test_companion_build_without_output_is_fatal(self) -> None:
        suite = _tailwind_like((TRUE, "{ruleset}", "{built}"))
        fs = FixtureSet()
        with self.assertRaises(BaselineAssetError) as ctx:
            materialize([suite], self._config(sizes=("small",)), fixtures=fs)
        self.assertIn("bench-tailwind-small-out.css", str(ctx.exception))
        self.assertIn(self.work_dir / "bench-tailwind-small-out.css", fs.created)

    def test_leftover_build_output_does_not_pass_for_failed_build(self) -> None:
        stale = self.work_dir / "bench-tailwind-small-out.css"
        stale.write_text(".stale{}")
        suite = _tailwind_like((FALSE, "{built}"))
        with self.assertRaises(BaselineAssetError):
            materialize([suite], self._config(sizes=("small",)))
        self.assertFalse(stale.exists())

    def test_leftover_build_output_replaced_by_fresh_build(self) -> None:
        (self.work_dir / "bench-tailwind-small-out.css").write_text(".stale{}")
        suite = _tailwind_like((CP, "{ruleset}", "{built}"))
        fs = materialize([suite], self._config(sizes=("small",)))
        self.assertEqual(fs.get("small", KIND_BUILT).payload, RULESET)

    def test_missing_build_executable_is_fatal(self) -> None:
        suite = _tailwind_like(("/nonexistent/cssbench-build", "{built}"))
        with self.assertRaises(BaselineAssetError):
            materialize([suite], self._config(sizes=("small",)))

    def test_build_companion_requires_build_step(self) -> None:
        with self.assertRaises(ValueError):
            build_companion(make_suite("a"), "small", FixtureSet(), config=self._config())


if __name__ == "__main__":
    unittest.main()
