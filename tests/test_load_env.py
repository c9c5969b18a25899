import os
from pathlib import Path

import run


def _parse_env_file(env_path: Path, *, override: bool = False) -> None:
    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, val = line.split("=", 1)
        key = key.strip()
        val = val.strip()
        if override or key not in os.environ:
            os.environ[key] = val


def test_load_env_is_optional_and_does_not_override_env(tmp_path: Path, monkeypatch):
    env_path = tmp_path / ".env"
    env_path.write_text("MAPBOX_ACCESS_TOKEN=from-dotenv\n", encoding="utf-8")

    called = {}

    def fake_load_dotenv(*, dotenv_path, override=False):
        called["dotenv_path"] = Path(dotenv_path).resolve()
        _parse_env_file(Path(dotenv_path), override=bool(override))
        return True

    monkeypatch.setattr(run, "_load_dotenv", fake_load_dotenv)
    monkeypatch.setenv("MAPBOX_ACCESS_TOKEN", "from-env")

    run.load_env(root_dir=tmp_path)

    assert called["dotenv_path"] == env_path.resolve()
    assert os.environ.get("MAPBOX_ACCESS_TOKEN") == "from-env"


def test_load_env_missing_file_is_noop(tmp_path: Path, monkeypatch):
    def fail(**kwargs):
        raise AssertionError("should not be called")

    monkeypatch.setattr(run, "_load_dotenv", fail)
    run.load_env(root_dir=tmp_path)


def test_build_payload_from_args(tmp_path: Path):
    polygon = tmp_path / "polygon.json"
    polygon.write_text('{"type": "Polygon", "coordinates": []}', encoding="utf-8")
    args = run.parse_args(
        [
            "--lat", "33.45", "--lng", "-112.07",
            "--sport", "volleyball", "--sport", "basketball",
            "--minutes", "25", "--school-type", "highSchool",
            "--polygon", str(polygon),
        ]
    )

    payload = run.build_payload(args)

    assert payload["origin"] == {"lat": 33.45, "lng": -112.07}
    assert payload["sports"] == ["volleyball", "basketball"]
    assert payload["driveTimeMinutes"] == 25
    assert payload["schoolTypes"] == ["highSchool"]
    assert payload["isochronePolygon"]["type"] == "Polygon"
