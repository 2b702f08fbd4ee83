"""Tests for the command line entry point."""

import pytest

from ctypesgl_generator import cli
from ctypesgl_generator.config import ConfigError, validate_profile


class TestMain:
    def test_generates_shared_bindings(self, gl_xml, tmp_path, capsys):
        out_dir = tmp_path / "bindings"
        cli.main(["--gl-xml", str(gl_xml), "--output-dir", str(out_dir), "--no-timestamp"])

        assert (out_dir / "gl" / "interop.py").exists()
        assert (out_dir / "gl" / "gl32.py").exists()
        assert (out_dir / "gles" / "gles20.py").exists()

        output = capsys.readouterr().out
        assert "Generating shared bindings..." in output
        assert "GL32: 4 functions, 3 enums" in output

    def test_isolated_without_error_checks(self, gl_xml, tmp_path):
        out_dir = tmp_path / "bindings"
        cli.main(
            [
                "--gl-xml", str(gl_xml),
                "--output-dir", str(out_dir),
                "--isolated",
                "--no-error-check",
            ]
        )

        assert not (out_dir / "gl" / "interop.py").exists()
        content = (out_dir / "gl" / "gl10.py").read_text()
        assert "class GL10Interop:" in content
        assert "LoadError" not in content
        assert " on " in content.splitlines()[1]

    def test_compatibility_profile(self, gl_xml, tmp_path):
        out_dir = tmp_path / "bindings"
        cli.main(["--gl-xml", str(gl_xml), "--output-dir", str(out_dir), "--profile", "compatibility"])

        assert "def glBegin(" in (out_dir / "gl" / "gl32.py").read_text()

    def test_invalid_profile(self, gl_xml, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--gl-xml", str(gl_xml), "--output-dir", str(tmp_path), "--profile", "es"])

        assert excinfo.value.code == 1
        output = capsys.readouterr().out
        assert "Config error [INVALID_PROFILE]" in output
        assert "Hint:" in output

    def test_missing_registry(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(cli, "download_gl_xml", lambda path, force=False: None)

        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--gl-xml", str(tmp_path / "gl.xml"), "--output-dir", str(tmp_path)])

        assert excinfo.value.code == 1
        assert "gl.xml not found" in capsys.readouterr().out

    def test_malformed_declaration(self, tmp_path, capsys):
        gl_xml = tmp_path / "gl.xml"
        gl_xml.write_text(
            "<registry><commands><command>"
            "<proto>void <name>glClear</name></proto>"
            "<param><ptype>GLbitfield</ptype></param>"
            "</command></commands></registry>"
        )

        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--gl-xml", str(gl_xml), "--output-dir", str(tmp_path / "out")])

        assert excinfo.value.code == 1
        assert "Error:" in capsys.readouterr().out


class TestDownload:
    def test_existing_file_is_kept(self, gl_xml, capsys, monkeypatch):
        def fail(*args):
            raise AssertionError("should not download")

        monkeypatch.setattr(cli.urllib.request, "urlretrieve", fail)
        cli.download_gl_xml(gl_xml)

        assert "already exists" in capsys.readouterr().out

    def test_download_failure_exits(self, tmp_path, monkeypatch):
        def fail(*args):
            raise OSError("offline")

        monkeypatch.setattr(cli.urllib.request, "urlretrieve", fail)
        with pytest.raises(SystemExit):
            cli.download_gl_xml(tmp_path / "gl.xml")


class TestConfigErrors:
    def test_invalid_profile_carries_code_and_hint(self):
        with pytest.raises(ConfigError) as excinfo:
            validate_profile("es")

        assert excinfo.value.code == "INVALID_PROFILE"
        assert excinfo.value.suggestion

    def test_unknown_code_is_rejected(self):
        with pytest.raises(ValueError, match="PATH_NOT_FOUND"):
            ConfigError("PATH_NOT_FOUND", "gl.xml not found")
