"""
Tests for the ssri command-line interface
"""

import base64
import hashlib
import io
import logging
import sys

import pytest

from ssri import __version__
from ssri.cli import create_parser, main

PAYLOAD = b"hello integrity\n"


def b64_hash(data: bytes, algorithm: str) -> str:
    return base64.b64encode(hashlib.new(algorithm, data).digest()).decode("ascii")


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def payload_file(tmp_path):
    path = tmp_path / "payload.txt"
    path.write_bytes(PAYLOAD)
    return str(path)


class TestParser:
    """Tests for argument parsing."""

    def test_hash_arguments(self):
        """Test repeatable algorithm and option flags."""
        args = create_parser().parse_args(["hash", "f", "-a", "sha256", "-a", "sha1", "-o", "x"])

        assert args.command == "hash"
        assert args.algorithms == ["sha256", "sha1"]
        assert args.options == ["x"]

    def test_check_requires_integrity(self):
        """Test check refuses to run without an expectation."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["check", "f"])


class TestHashCommand:
    """Tests for the hash command."""

    def test_default_algorithm(self, payload_file, capsys):
        """Test sha512 is computed by default."""
        assert main(["hash", payload_file]) == 0

        assert capsys.readouterr().out.strip() == f"sha512-{b64_hash(PAYLOAD, 'sha512')}"

    def test_algorithms_and_options(self, payload_file, capsys):
        """Test requested algorithms and options are used."""
        assert main(["hash", payload_file, "-a", "sha256", "-a", "sha1", "-o", "foo"]) == 0

        assert capsys.readouterr().out.strip() == (
            f"sha256-{b64_hash(PAYLOAD, 'sha256')}?foo sha1-{b64_hash(PAYLOAD, 'sha1')}?foo"
        )

    def test_stdin(self, monkeypatch, capsys):
        """Test - reads from stdin."""
        monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(PAYLOAD)))

        assert main(["hash", "-", "-a", "sha256"]) == 0

        assert capsys.readouterr().out.strip() == f"sha256-{b64_hash(PAYLOAD, 'sha256')}"

    def test_unsupported_algorithm(self, payload_file, capsys):
        """Test unknown algorithms are reported as errors."""
        assert main(["hash", payload_file, "-a", "nope"]) == 1

        assert "EUNSUPPORTED" in capsys.readouterr().err

    def test_config_defaults(self, payload_file, tmp_path, capsys):
        """Test default algorithms and separator come from the config file."""
        config = tmp_path / "ssri.yaml"
        config.write_text(
            "hashing:\n  default_algorithms: [sha256, sha384]\n"
            "parsing:\n  separator: \"\\n\"\n"
        )

        assert main(["-c", str(config), "hash", payload_file]) == 0

        assert capsys.readouterr().out.splitlines() == [
            f"sha256-{b64_hash(PAYLOAD, 'sha256')}",
            f"sha384-{b64_hash(PAYLOAD, 'sha384')}",
        ]


class TestCheckCommand:
    """Tests for the check command."""

    def test_match(self, payload_file, capsys):
        """Test a match prints the matching entry."""
        sri = f"sha512-{b64_hash(PAYLOAD, 'sha512')}"

        assert main(["check", payload_file, "-i", sri]) == 0

        assert capsys.readouterr().out.strip() == sri

    def test_mismatch(self, payload_file, capsys):
        """Test a mismatch exits non-zero with a structured error."""
        sri = f"sha512-{b64_hash(b'other', 'sha512')}"

        assert main(["check", payload_file, "-i", sri]) == 1

        assert '"EINTEGRITY"' in capsys.readouterr().err

    def test_size_mismatch(self, payload_file, capsys):
        """Test the size guard."""
        sri = f"sha512-{b64_hash(PAYLOAD, 'sha512')}"

        assert main(["check", payload_file, "-i", sri, "--size", "1"]) == 1

        assert '"EBADSIZE"' in capsys.readouterr().err

    def test_garbage_integrity(self, payload_file, capsys):
        """Test an expectation without valid entries is an error."""
        assert main(["check", payload_file, "-i", "garbage"]) == 1

        assert "ENOALGORITHM" in capsys.readouterr().err


class TestStringCommands:
    """Tests for commands that work on integrity strings."""

    def test_normalize(self, capsys):
        """Test whitespace is cleaned up and malformed entries dropped."""
        assert main(["normalize", " sha512-foo \n\t sha1-bar bad "]) == 0

        assert capsys.readouterr().out.strip() == "sha512-foo sha1-bar"

    def test_normalize_strict(self, capsys):
        """Test strict normalization keeps W3C algorithms only."""
        assert main(["normalize", "--strict", "sha512-foo sha1-bar"]) == 0

        assert capsys.readouterr().out.strip() == "sha512-foo"

    def test_normalize_separator(self, capsys):
        """Test a custom separator."""
        assert main(["normalize", "--sep", ",", "sha512-foo sha1-bar"]) == 0

        assert capsys.readouterr().out.strip() == "sha512-foo,sha1-bar"

    def test_hex(self, capsys):
        """Test hex digest of the priority entry."""
        assert main(["hex", "sha1-AAAA sha512-/w=="]) == 0

        assert capsys.readouterr().out.strip() == "ff"

    def test_from_hex(self, capsys):
        """Test building an entry from hex."""
        assert main(["from-hex", "deadbeef", "-a", "sha1", "-o", "x"]) == 0

        assert capsys.readouterr().out.strip() == "sha1-3q2+7w==?x"

    def test_from_hex_invalid(self, capsys):
        """Test malformed hex exits non-zero."""
        assert main(["from-hex", "zz", "-a", "sha1"]) == 1

        assert "Invalid hex digest" in capsys.readouterr().err

    def test_pick(self, capsys):
        """Test the trusted algorithm is printed."""
        assert main(["pick", "sha1-a sha384-b sha256-c"]) == 0

        assert capsys.readouterr().out.strip() == "sha384"

    def test_pick_empty(self, capsys):
        """Test picking from nothing is an error."""
        assert main(["pick", "garbage"]) == 1

        assert "ENOALGORITHM" in capsys.readouterr().err


class TestMisc:
    """Tests for version, missing commands and config errors."""

    def test_version(self, capsys):
        """Test version output."""
        assert main(["version"]) == 0

        assert capsys.readouterr().out.strip() == f"ssri {__version__}"

    def test_no_command(self, capsys):
        """Test running without a command."""
        assert main([]) == 1

    def test_missing_config(self, tmp_path, capsys):
        """Test a missing config file is reported."""
        assert main(["-c", str(tmp_path / "nope.yaml"), "version"]) == 1

        assert "Failed to load config" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path, capsys):
        """Test an invalid config file is reported."""
        config = tmp_path / "bad.yaml"
        config.write_text("hashing:\n  chunk_size: 0\n")

        assert main(["-c", str(config), "version"]) == 1

        assert "Failed to load config" in capsys.readouterr().err
