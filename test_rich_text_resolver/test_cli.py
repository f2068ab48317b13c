import json
import pathlib

import pytest
from pytest_mock import MockerFixture

from rich_text_resolver.cli import _main, convert
from test_rich_text_resolver.unit_utils import CaptureFixture


@pytest.fixture()
def markup_file(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "field.html"
    path.write_text("<h1>Title</h1><p>hello <em>world</em></p>", encoding="utf-8")
    return path


def test_main_writes_portable_text_json_to_stdout(markup_file, capsys: CaptureFixture[str]):
    assert _main([str(markup_file)]) == 0

    block_dicts = json.loads(capsys.readouterr().out)
    assert [d["style"] for d in block_dicts] == ["h1", "normal"]
    assert block_dicts[1]["children"][1]["marks"] == ["em"]


def test_main_writes_html_to_the_output_file(markup_file, tmp_path: pathlib.Path):
    output = tmp_path / "field.out.html"

    assert _main([str(markup_file), "--to", "html", "--output", str(output)]) == 0

    assert output.read_text(encoding="utf-8") == "<h1>Title</h1><p>hello <em>world</em></p>"


def test_main_reads_portable_text_json(markup_file, tmp_path: pathlib.Path, capsys):
    json_file = tmp_path / "field.json"
    assert _main([str(markup_file), "--output", str(json_file)]) == 0

    assert _main([str(json_file), "--from", "json", "--to", "mapi"]) == 0

    assert capsys.readouterr().out == "<h1>Title</h1><p>hello <em>world</em></p>\n"


def test_main_reports_an_unresolvable_reference(tmp_path: pathlib.Path, caplog):
    path = tmp_path / "broken.html"
    path.write_text("<figure><img src='/a.png'></figure>", encoding="utf-8")

    assert _main([str(path)]) == 1
    assert "Unable to resolve asset reference for <figure> element" in caplog.text


def test_convert_renders_the_requested_format():
    assert convert("<p>x</p>", target_format="html") == "<p>x</p>"
    assert json.loads(convert("<p>x</p>"))[0]["_type"] == "block"


def test_main_passes_the_requested_formats_to_convert(
    mocker: MockerFixture, markup_file, capsys: CaptureFixture[str]
):
    convert_ = mocker.patch("rich_text_resolver.cli.convert", return_value="converted")

    assert _main([str(markup_file), "--from", "json", "--to", "mapi"]) == 0

    convert_.assert_called_once_with(
        "<h1>Title</h1><p>hello <em>world</em></p>", "json", "mapi"
    )
    assert capsys.readouterr().out == "converted\n"


@pytest.mark.parametrize("target_format", ["json", "html", "mapi"])
def test_convert_dispatches_to_the_renderer_for_the_target_format(
    mocker: MockerFixture, target_format: str
):
    renderers = {
        "json": mocker.patch("rich_text_resolver.cli.blocks_to_json", return_value="J"),
        "html": mocker.patch("rich_text_resolver.cli.to_html", return_value="H"),
        "mapi": mocker.patch("rich_text_resolver.cli.to_management_api_format", return_value="M"),
    }

    result = convert("<p>x</p>", target_format=target_format)

    assert result == {"json": "J", "html": "H", "mapi": "M"}[target_format]
    for name, renderer in renderers.items():
        assert renderer.called is (name == target_format)
