"""Tests for the command line interface."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from peer_identity.__main__ import LevelFormatter, main
from peer_identity.derivation import address_to_id
from peer_identity.multihash import to_base58
from peer_identity.peer_id import PeerIdentity

IPFS_README = "QmXoypizjW3WknFiJnKLwHCnL72vedxjQkDDP1mXWo6uco"


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """Drop the handlers each CLI run installs on the root logger."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestGenerate:
    def test_prints_record(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["generate"]) == 0

        record = json.loads(capsys.readouterr().out)
        assert set(record) == {"id", "privKey", "pubKey"}
        PeerIdentity.from_json(record).validate()

    def test_writes_file(self, tmp_path: Path) -> None:
        output = tmp_path / "peer.json"
        assert main(["--no-color", "generate", "--output", str(output)]) == 0

        peer = PeerIdentity.from_json(output.read_text())
        assert peer.private_key is not None


class TestInspect:
    def test_base58(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["inspect", IPFS_README]) == 0

        out = capsys.readouterr().out
        assert f"base58:  {IPFS_README}" in out
        assert "display: <peer.ID Xoypiz>" in out
        assert "hex:     1220" in out

    def test_invalid_identity(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Decoding failures exit with status 1 and no output."""
        assert main(["--no-color", "inspect", "0OIl"]) == 1
        assert capsys.readouterr().out == ""


class TestVerify:
    def test_consistent_record(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        peer = PeerIdentity.generate()
        path = tmp_path / "peer.json"
        path.write_text(peer.to_json_string())

        assert main(["verify", str(path)]) == 0
        assert capsys.readouterr().out.strip() == peer.to_base58()

    def test_inconsistent_record(self, tmp_path: Path) -> None:
        peer = PeerIdentity.generate()
        other = PeerIdentity.generate()
        path = tmp_path / "peer.json"
        path.write_text(json.dumps(peer.to_json() | {"id": other.to_base58()}))

        assert main(["--no-color", "verify", str(path)]) == 1


class TestFromAddress:
    @pytest.mark.parametrize("prefix", ["", "0x"])
    def test_hex_address(self, prefix: str, capsys: pytest.CaptureFixture[str]) -> None:
        address = "7e5f4552091a69125d5dfcb7b8c2659029395bdf"
        assert main(["from-address", prefix + address]) == 0

        expected = to_base58(address_to_id(bytes.fromhex(address)))
        assert capsys.readouterr().out.strip() == expected

    def test_invalid_hex(self) -> None:
        assert main(["--no-color", "from-address", "xyz"]) == 1


class TestLevelFormatter:
    """Tests for the log line format."""

    @staticmethod
    def _record(level: int) -> logging.LogRecord:
        return logging.makeLogRecord(
            {
                "name": "peer_identity.peer_id",
                "levelno": level,
                "levelname": logging.getLevelName(level),
                "msg": "loaded %s",
                "args": ("Qm",),
            }
        )

    def test_plain(self) -> None:
        line = LevelFormatter(color=False).format(self._record(logging.INFO))
        assert line == "INFO     peer_identity.peer_id: loaded Qm"

    def test_colored_level_only(self) -> None:
        line = LevelFormatter(color=True).format(self._record(logging.ERROR))

        assert line.startswith(LevelFormatter.COLORS[logging.ERROR] + "ERROR   ")
        assert line.endswith(LevelFormatter.RESET + " peer_identity.peer_id: loaded Qm")

    def test_record_left_untouched(self) -> None:
        """Other handlers still see the bare level name."""
        record = self._record(logging.WARNING)
        LevelFormatter(color=True).format(record)
        assert record.levelname == "WARNING"
