from typer.testing import CliRunner

from main import app, parse_matrix

runner = CliRunner()


def test_eval():
    result = runner.invoke(app, ["eval", "2+3*4"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "14"


def test_eval_uses_degrees_by_default():
    assert runner.invoke(app, ["eval", "sin(90)"]).stdout.strip() == "1"
    assert runner.invoke(app, ["eval", "sin(pi/2)", "--rad"]).stdout.strip() == "1"


def test_eval_precise():
    result = runner.invoke(app, ["eval", "pi", "--precise", "--more", "1"])
    assert result.exit_code == 0
    assert result.stdout.strip().startswith("3.14159265358979323846")


def test_eval_more_requires_precise():
    result = runner.invoke(app, ["eval", "pi", "--more", "1"])
    assert result.exit_code == 1


def test_eval_invalid_expression():
    result = runner.invoke(app, ["eval", "(1+2"])
    assert result.exit_code == 1


def test_matrix_commands():
    result = runner.invoke(app, ["matrix", "determinant", "1 2; 3 4"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "-2"

    result = runner.invoke(app, ["matrix", "inverse", "1 2; 2 4"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["matrix", "determinant", "1 2 3 4; 1 2 3 4; 1 2 3 4; 1 2 3 4"])
    assert result.exit_code == 1


def test_parse_matrix():
    assert parse_matrix("1, 2; 3 x") == [[1.0, 2.0], [3.0, 0.0]]


def test_stats():
    result = runner.invoke(app, ["stats", "1,2,2,3,4"])
    assert result.exit_code == 0
    assert "2.4" in result.stdout
    assert "1.04" in result.stdout

    assert runner.invoke(app, ["stats", "a,b"]).exit_code == 1


def test_convert():
    result = runner.invoke(app, ["convert", "100", "temperature", "celsius", "fahrenheit"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "212 fahrenheit"

    assert runner.invoke(app, ["convert", "1", "length", "meters", "parsecs"]).exit_code == 1


def test_stats_out_of_float_range():
    for dataset in ("1e200, -1e200", "1e308, 1e308"):
        result = runner.invoke(app, ["stats", dataset])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)


def test_matrix_determinant_out_of_float_range():
    result = runner.invoke(app, ["matrix", "determinant", "1e200 0; 0 1e200"])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)

    result = runner.invoke(app, ["matrix", "inverse", "1e200 0; 0 1e200"])
    assert result.exit_code == 0
    assert "1.000000e-200" in result.stdout
