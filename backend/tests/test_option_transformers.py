from quizhub import models
from quizhub.schemas import OptionIn, OptionMixedContent, OptionTextContent
from quizhub.utils.option_transformers import (
    DB_OPTION_FIELDS,
    app_option_to_db_input,
    app_options_to_db_inputs,
    db_option_to_app,
    db_options_to_app,
)


def test_plain_legacy_row_has_no_content():
    row = models.Option(id=4, question_id=1, text="Yes", text_sl="Da", correct=True)
    opt = db_option_to_app(row)
    assert opt.id == "4"
    assert opt.content is None
    assert opt.text_sl == "Da"
    assert opt.is_correct


def test_image_row_is_upgraded_to_mixed_content():
    row = models.Option(id=5, question_id=1, text="ignored", image_url="/pic.png", content_type="image")
    opt = db_option_to_app(row)
    assert isinstance(opt.content, OptionMixedContent)
    assert opt.content.image_url == "/pic.png"
    assert opt.content.text == ""


def test_text_row_with_content_type():
    row = models.Option(id=6, question_id=1, text="Hi", content_type="text")
    opt = db_option_to_app(row)
    assert isinstance(opt.content, OptionTextContent)
    assert opt.content.text == "Hi"


def test_db_input_carries_every_column_and_defaults_to_text():
    data = app_option_to_db_input(OptionIn(text="Plain"))
    assert set(data) == set(DB_OPTION_FIELDS)
    assert data["content_type"] == "text"
    assert data["text"] == "Plain"
    assert data["image_url"] is None
    assert data["correct"] is False


def test_mixed_option_to_db_input():
    opt = OptionIn(content=OptionMixedContent(text="Cat", image_url="/cat.png"), is_correct=True)
    data = app_option_to_db_input(opt)
    assert data["content_type"] == "mixed"
    assert data["image_url"] == "/cat.png"
    assert data["correct"] is True


def test_batch_helpers():
    rows = [models.Option(id=1, question_id=1, text="a"), models.Option(id=2, question_id=1, text="b")]
    assert [o.id for o in db_options_to_app(rows)] == ["1", "2"]
    assert app_options_to_db_inputs(None) == []
    assert len(app_options_to_db_inputs([OptionIn(text="a")])) == 1
