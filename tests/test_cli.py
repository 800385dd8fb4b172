import pandas as pd
import pytest

from ikebana_wall.cli import main, parse_drop
from ikebana_wall.models import Drop


def test_parse_drop():
    assert parse_drop("120,80.5") == Drop(120, 80.5)


def test_bad_drop_is_an_argument_error(tmp_path):
    with pytest.raises(SystemExit):
        main(["--drop", "nope", "--output-dir", str(tmp_path)])


def test_more_drops_than_flowers(tmp_path):
    with pytest.raises(SystemExit):
        main(["--count", "1", "--drop", "1,2", "--drop", "3,4", "--output-dir", str(tmp_path)])


def test_batch_outputs(tmp_path, capsys):
    main(
        [
            "--count",
            "4",
            "--seed",
            "5",
            "--season",
            "summer",
            "--width",
            "320",
            "--height",
            "300",
            "--drop",
            "150,90",
            "--output-dir",
            str(tmp_path),
            "--prefix",
            "t",
        ]
    )
    names = sorted(p.name for p in tmp_path.iterdir())
    assert any(n.endswith("_wall.png") for n in names)
    assert any(n.endswith("_flower.png") for n in names)
    csv = next(tmp_path.glob("t_*_composition.csv"))
    df = pd.read_csv(csv)
    assert list(df["role"]) == [0, 1, 2, 2]
    assert list(df["seed"]) == [5, 6, 7, 8]
    assert df["drop_x"].iloc[0] == 150
    assert "[wall] 4 flower(s)" in capsys.readouterr().out


def test_gif_output(tmp_path):
    main(
        [
            "--count",
            "1",
            "--width",
            "200",
            "--height",
            "200",
            "--preview-gif",
            "--frames",
            "2",
            "--fps",
            "4",
            "--output-dir",
            str(tmp_path),
        ]
    )
    assert list(tmp_path.glob("*_wall.gif"))
