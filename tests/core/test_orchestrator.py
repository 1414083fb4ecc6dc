"""End-to-end tests for BuildOrchestrator.

Covers:
- Output tree mirrors the source tree minus exclusions
- Obfuscated script names and HTML reference rewriting
- Deferred versus inline HTML processing
- Domain guard injection
- Data directory staging
- Reproducibility and failure handling
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import pytest

from sitebuilder.core.orchestrator import BuildOrchestrator, JobState
from sitebuilder.processors import generate_domain_guard

from tests.core.conftest import create_test_file, snapshot_tree


HASHED_JS = re.compile(r"^[0-9a-f]{8}\.js$")


@pytest.fixture
def sample_site(site_dir: Path) -> Path:
    """A small site with assets, nested directories and excluded entries."""
    create_test_file(site_dir, "index.html", "<html><body><script src='js/app.js'></script></body></html>\n")
    create_test_file(site_dir, "about.htm", "<p>About</p>\n")
    create_test_file(site_dir, "js/app.js", "var total = 1;\nconsole.log(total);\n")
    create_test_file(site_dir, "css/site.css", "body {\n  color : red;\n}\n")
    create_test_file(site_dir, "img/logo.png", b"\x89PNG\r\n\x1a\n\x00\x01")
    create_test_file(site_dir, "README.md", "# docs\n")
    create_test_file(site_dir, "node_modules/lib/index.js", "module.exports = 1;\n")
    create_test_file(site_dir, "docs/.DS_Store", b"\x00")
    return site_dir


class TestBuildOutputTree:
    """The output tree mirrors the source tree minus exclusions."""

    def test_every_included_file_has_one_output(self, sample_site, output_dir, make_config):
        result = BuildOrchestrator(make_config(minify=False)).run()

        assert result.success is True
        assert result.current_state == JobState.COMPLETED
        assert sorted(snapshot_tree(output_dir)) == [
            "about.htm",
            "css/site.css",
            "img/logo.png",
            "index.html",
            "js/app.js",
        ]
        assert result.files_processed == 5

    def test_excluded_paths_are_absent(self, sample_site, output_dir, make_config):
        BuildOrchestrator(make_config()).run()

        names = snapshot_tree(output_dir)
        assert not any(name.startswith("node_modules") for name in names)
        assert "README.md" not in names
        assert not any(name.endswith(".DS_Store") for name in names)

    def test_output_root_is_recreated(self, sample_site, output_dir, make_config):
        create_test_file(output_dir, "stale.txt", "old build")

        BuildOrchestrator(make_config()).run()

        assert not (output_dir / "stale.txt").exists()

    def test_output_inside_source_is_not_reingested(self, sample_site, make_config):
        output = sample_site / "build" / "public"
        config = make_config(output_dir=str(output), minify=False)

        BuildOrchestrator(config).run()
        result = BuildOrchestrator(config).run()

        assert result.success is True
        assert not (output / "build").exists()

    def test_binary_files_copied_verbatim(self, sample_site, output_dir, make_config):
        BuildOrchestrator(make_config()).run()

        assert (output_dir / "img/logo.png").read_bytes() == (sample_site / "img/logo.png").read_bytes()


class TestMinification:
    """Minify on and off."""

    def test_disabled_minification_preserves_bytes(self, sample_site, output_dir, make_config):
        create_test_file(sample_site, "js/crlf.js", "var a = 1;\r\n// keep\r\n")

        BuildOrchestrator(make_config(minify=False)).run()

        for rel in ("index.html", "about.htm", "js/app.js", "js/crlf.js", "css/site.css"):
            assert (output_dir / rel).read_bytes() == (sample_site / rel).read_bytes()

    def test_legacy_encoded_files_round_trip(self, site_dir, output_dir, make_config):
        create_test_file(site_dir, "legacy.js", b"var s='caf\xe9';\r\n")
        create_test_file(site_dir, "legacy.html", b"<p>caf\xe9</p>\n")
        create_test_file(site_dir, "legacy.css", b"/* \xe9 */ p { color : red }")

        result = BuildOrchestrator(make_config(minify=False)).run()

        assert result.success is True
        for rel in ("legacy.js", "legacy.html", "legacy.css"):
            assert (output_dir / rel).read_bytes() == (site_dir / rel).read_bytes()

    def test_legacy_encoded_files_do_not_abort_minified_build(self, site_dir, output_dir, make_config):
        create_test_file(site_dir, "legacy.js", b"var s = 'caf\xe9';\n")
        create_test_file(site_dir, "legacy.css", b"p { content : '\xe9' }")

        config = make_config(minify=True, obfuscate_filenames=True, deterministic_filenames=True)
        result = BuildOrchestrator(config).run()

        assert result.success is True
        assert (output_dir / "legacy.css").read_bytes() == b"p{content:'\xe9'}"
        hashed = result.filename_mapping["legacy.js"]
        assert b"caf\xe9" in (output_dir / hashed).read_bytes()

    def test_enabled_minification_shrinks_assets(self, sample_site, output_dir, make_config):
        BuildOrchestrator(make_config(minify=True)).run()

        assert (output_dir / "css/site.css").read_text() == "body{color:red;}"
        script = (output_dir / "js/app.js").read_text()
        assert "console.log" not in script
        assert "var total=1;" in script

    def test_minification_failure_is_not_fatal(self, sample_site, output_dir, make_config):
        from unittest.mock import patch

        with patch(
            "sitebuilder.processors.html_processor.htmlmin.minify",
            side_effect=ValueError("bad markup"),
        ):
            result = BuildOrchestrator(make_config(minify=True)).run()

        assert result.success is True
        assert (output_dir / "about.htm").read_bytes() == (sample_site / "about.htm").read_bytes()
        assert any("Could not minify about.htm" in warning for warning in result.warnings)


class TestFilenameObfuscation:
    """Renamed scripts and rewritten references."""

    def test_html_references_hashed_script(self, site_dir, output_dir, make_config):
        create_test_file(site_dir, "a.js", "console.log(1)")
        create_test_file(site_dir, "index.html", "<script src='a.js'></script>")

        result = BuildOrchestrator(make_config(obfuscate_filenames=True, minify=False)).run()

        hashed = result.filename_mapping["a.js"]
        assert HASHED_JS.match(hashed)
        assert (output_dir / hashed).read_text() == "console.log(1)"
        assert not (output_dir / "a.js").exists()
        html = (output_dir / "index.html").read_text()
        match = re.search(r"src=['\"]([^'\"]+)['\"]", html)
        assert match is not None
        assert match.group(1) == hashed

    def test_nested_script_keeps_directory_prefix(self, sample_site, output_dir, make_config):
        result = BuildOrchestrator(make_config(obfuscate_filenames=True, minify=False)).run()

        hashed = result.filename_mapping["app.js"]
        assert (output_dir / "js" / hashed).exists()
        assert f"src='js/{hashed}'" in (output_dir / "index.html").read_text()

    def test_deterministic_names_repeat_across_runs(self, sample_site, output_dir, make_config):
        config = make_config(obfuscate_filenames=True, deterministic_filenames=True)

        first = BuildOrchestrator(config).run().filename_mapping
        second = BuildOrchestrator(config).run().filename_mapping

        assert first == second

    def test_inline_mode_only_sees_earlier_scripts(self, site_dir, output_dir, make_config, monkeypatch):
        create_test_file(site_dir, "a.js", "var a = 1;")
        create_test_file(site_dir, "index.html", "<script src='a.js'></script>")

        real_listdir = os.listdir

        def html_first(path):
            return sorted(real_listdir(path), key=lambda name: not name.endswith(".html"))

        monkeypatch.setattr(os, "listdir", html_first)
        result = BuildOrchestrator(
            make_config(obfuscate_filenames=True, minify=False, html_rewrite="inline")
        ).run()

        assert "a.js" in result.filename_mapping
        assert (output_dir / "index.html").read_text() == "<script src='a.js'></script>"

    def test_deferred_mode_sees_later_scripts(self, site_dir, output_dir, make_config, monkeypatch):
        create_test_file(site_dir, "a.js", "var a = 1;")
        create_test_file(site_dir, "index.html", "<script src='a.js'></script>")

        real_listdir = os.listdir

        def html_first(path):
            return sorted(real_listdir(path), key=lambda name: not name.endswith(".html"))

        monkeypatch.setattr(os, "listdir", html_first)
        result = BuildOrchestrator(
            make_config(obfuscate_filenames=True, minify=False, html_rewrite="deferred")
        ).run()

        hashed = result.filename_mapping["a.js"]
        assert (output_dir / "index.html").read_text() == f"<script src='{hashed}'></script>"


class TestDomainGuard:
    """Guard injection into every script."""

    def test_every_script_starts_with_guard(self, sample_site, output_dir, make_config):
        create_test_file(sample_site, "js/extra/more.js", "var more = 2;")
        config = make_config(allowed_domains=["example.com"], minify=True)
        guard = generate_domain_guard(["example.com"])

        BuildOrchestrator(config).run()

        scripts = [path for path in output_dir.rglob("*.js")]
        assert len(scripts) == 2
        for script in scripts:
            assert script.read_text(encoding="utf-8").startswith(guard)

    def test_guard_prepended_when_minification_fails(self, site_dir, output_dir, make_config):
        from unittest.mock import patch

        from sitebuilder.processors.base import MinifyResult

        create_test_file(site_dir, "app.js", "var x = 1;")
        guard = generate_domain_guard(["example.com"])

        with patch(
            "sitebuilder.processors.javascript_processor.JavaScriptProcessor.minify",
            return_value=MinifyResult(code="var x = 1;", success=False, errors=["boom"]),
        ):
            result = BuildOrchestrator(make_config(allowed_domains=["example.com"])).run()

        assert result.success is True
        assert (output_dir / "app.js").read_text() == guard + "var x = 1;"

    def test_empty_domain_list_disables_guard(self, site_dir, output_dir, make_config):
        create_test_file(site_dir, "app.js", "var x = 1;")

        BuildOrchestrator(make_config(allowed_domains=[], minify=False)).run()

        assert (output_dir / "app.js").read_text() == "var x = 1;"


class TestDataStaging:
    """Second pass over data/llm."""

    def test_only_json_is_staged(self, site_dir, output_dir, make_config):
        create_test_file(site_dir, "data/llm/x.json", '{"a": 1}')
        create_test_file(site_dir, "data/llm/x.pdf", b"%PDF-1.4")
        create_test_file(site_dir, "data/pdf/manual.pdf", b"%PDF-1.4")
        create_test_file(site_dir, "data/pdf/extract.py", "print(1)\n")

        result = BuildOrchestrator(make_config()).run()

        assert result.data_files_copied == 1
        assert sorted(os.listdir(output_dir / "data" / "llm")) == ["x.json"]
        assert not (output_dir / "data" / "pdf").exists()

    def test_missing_data_directory_is_skipped(self, sample_site, output_dir, make_config, caplog):
        with caplog.at_level("INFO"):
            result = BuildOrchestrator(make_config()).run()

        assert result.success is True
        assert result.data_files_copied == 0
        assert "No data/llm directory found, skipping..." in caplog.text


class TestReproducibilityAndFailures:
    """Repeat runs and fatal errors."""

    def test_repeat_builds_are_byte_identical(self, sample_site, output_dir, make_config):
        config = make_config(minify=True, allowed_domains=["example.com"])

        BuildOrchestrator(config).run()
        first = snapshot_tree(output_dir)
        BuildOrchestrator(config).run()
        second = snapshot_tree(output_dir)

        assert first == second

    def test_missing_source_fails(self, tmp_path, make_config):
        result = BuildOrchestrator(make_config(source_dir=str(tmp_path / "nope"))).run()

        assert result.success is False
        assert result.current_state == JobState.FAILED
        assert "Source directory not found" in result.errors[0]

    def test_output_containing_source_leaves_source_intact(self, sample_site, make_config):
        before = snapshot_tree(sample_site)

        result = BuildOrchestrator(make_config(output_dir=str(sample_site.parent))).run()

        assert result.success is False
        assert result.current_state == JobState.FAILED
        assert "must not contain 'source_dir'" in result.errors[0]
        assert snapshot_tree(sample_site) == before

    def test_invalid_config_fails(self, sample_site, make_config):
        result = BuildOrchestrator(make_config(js_minifier="closure")).run()

        assert result.success is False
        assert "js_minifier" in result.errors[0]

    @pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="requires POSIX permissions as non-root")
    def test_unreadable_file_aborts_build(self, sample_site, make_config):
        secret = create_test_file(sample_site, "secret.js", "var s = 1;")
        os.chmod(secret, 0o000)
        try:
            result = BuildOrchestrator(make_config()).run()
        finally:
            os.chmod(secret, 0o644)

        assert result.success is False
        assert result.errors[0].startswith("PermissionError")
