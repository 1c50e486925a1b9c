"""Tests for the command-line tools."""
import json
from dataclasses import replace

import pytest
from pressure.cli import generate_main, solve_main
from pressure.core.connectivity import is_connected
from pressure.utils.helpers import level_to_json, load_levels, save_levels


@pytest.fixture
def broken_file(tmp_path, solved_level, row_level):
    """Level file with one pre-solved level and one good level."""
    path = tmp_path / "levels.json"
    good = replace(row_level, id=2)
    save_levels(str(path), [solved_level, good])
    return path


class TestSolveCommand:
    """Tests for pressure-solve."""

    def test_builtin_levels_pass(self, capsys):
        """Test the built-in classic set verifies cleanly."""
        assert solve_main([]) == 0
        out = capsys.readouterr().out
        assert "CLASSIC (10 levels)" in out
        assert "All levels solved!" in out

    def test_list(self, capsys):
        """Test --list prints the available level sets."""
        assert solve_main(["--list"]) == 0
        assert "classic: 10 levels" in capsys.readouterr().out

    def test_mode_without_builtin_levels(self, capsys):
        """Test a mode with no built-in set exits with an error."""
        assert solve_main(["--mode", "zen"]) == 1
        assert "no built-in levels" in capsys.readouterr().err

    def test_failing_file(self, broken_file, capsys):
        """Test a pre-solved level makes the run fail."""
        assert solve_main(["--levels", str(broken_file)]) == 1
        out = capsys.readouterr().out
        assert "already solved at start" in out
        assert "Total: 1 won" in out

    def test_missing_file(self, tmp_path, capsys):
        """Test a missing levels file is reported on stderr."""
        assert solve_main(["--levels", str(tmp_path / "nope.json")]) == 1
        assert "could not load levels" in capsys.readouterr().err

    def test_write_fixes(self, broken_file, tmp_path, capsys):
        """Test --write saves repaired levels that then pass."""
        output = tmp_path / "fixed.json"
        assert solve_main(["--levels", str(broken_file), "--write", "--output", str(output), "--seed", "3"]) == 1

        out = capsys.readouterr().out
        assert "Auto-fix mode enabled" in out
        assert "Fixed: Scrambled" in out

        fixed = load_levels(str(output))
        assert [level.id for level in fixed] == [1, 2]
        assert not is_connected(fixed[0].grid, fixed[0].goal_nodes)
        assert solve_main(["--levels", str(output)]) == 0

    def test_verbose_renders_boards(self, broken_file, capsys):
        """Test verbose output includes board renders and the log."""
        solve_main(["--levels", str(broken_file), "--verbose"])
        out = capsys.readouterr().out
        assert "[┼]" in out
        assert "Goals are connected before any move" in out


class TestGenerateCommand:
    """Tests for pressure-generate."""

    def test_prints_json(self, capsys):
        """Test generated levels are printed as JSON."""
        code = generate_main(["--cols", "5", "--rows", "5", "--difficulty", "easy", "--seed", "4"])
        data = json.loads(capsys.readouterr().out)
        assert code == (0 if len(data["levels"]) == 1 else 1)
        for level in data["levels"]:
            assert level["gridCols"] == 5
            assert level["isGenerated"]

    def test_writes_file(self, tmp_path, capsys):
        """Test generated levels are written to --output."""
        output = tmp_path / "generated.json"
        code = generate_main([
            "--cols", "6", "--rows", "6", "--count", "2", "--start-id", "10",
            "--seed", "1", "--output", str(output),
        ])
        levels = load_levels(str(output))
        assert code == (0 if len(levels) == 2 else 1)
        assert all(level.id in (10, 11) for level in levels)
        assert "Wrote" in capsys.readouterr().out

    def test_invalid_params(self, capsys):
        """Test bad generation parameters exit with code 2."""
        assert generate_main(["--cols", "3"]) == 2
        assert "Error" in capsys.readouterr().err

    def test_output_loads_back(self, tmp_path, capsys):
        """Test printed JSON loads back as levels."""
        generate_main(["--cols", "5", "--rows", "5", "--seed", "2", "--difficulty", "easy"])
        data = json.loads(capsys.readouterr().out)
        path = tmp_path / "roundtrip.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        for level in load_levels(str(path)):
            assert level_to_json(level)["maxMoves"] == level.max_moves
