"""Smoke test for scripts/demo_terminal.py."""

import importlib.util
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "demo_terminal.py"


@pytest.fixture
def demo():
    spec = importlib.util.spec_from_file_location("demo_terminal", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestDemoTerminal:

    def test_runs_a_shift(self, demo, capsys):
        assert demo.main([]) == 0
        out = capsys.readouterr().out

        assert "checkout -> REJECTED" in out
        assert "SALE-20240614-000004" in out
        assert "critical stock: Whisky Black Label" in out
        assert "*Transactions:* 4" in out
        assert "https://wa.me/?text=" in out

    def test_writes_documents(self, demo, tmp_path, capsys):
        assert demo.main(["--out", str(tmp_path)]) == 0
        names = sorted(p.name for p in tmp_path.iterdir())
        assert "Report_2024-06-14.xlsx" in names
        assert len([n for n in names if n.startswith("Ticket_")]) == 4
