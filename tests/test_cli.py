from skirmish.cli import main


def test_simulate_runs(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert main(["simulate", "flamling", "10", "leafling", "8", "--seed", "3", "--max-turns", "5"]) == 0
    assert "Outcome:" in capsys.readouterr().out


def test_unknown_species_is_an_error(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert main(["simulate", "nobody", "10", "leafling", "8"]) == 1


def test_species_listing(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert main(["species"]) == 0
    assert "Sparkit" in capsys.readouterr().out
