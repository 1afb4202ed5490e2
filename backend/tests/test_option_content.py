from quizhub.schemas import OptionIn, OptionMixedContent, OptionTextContent
from quizhub.utils.option_content import (
    content_to_legacy_option,
    create_default_option,
    create_mixed_option,
    get_localized_option_text,
    get_option_content_type,
    get_option_image_url,
    has_content_system,
    is_valid_option,
    legacy_option_to_content,
    option_has_image,
)


def test_legacy_option_text_falls_back_to_english():
    opt = OptionIn(text="Dog", text_sl="Pes")
    assert not has_content_system(opt)
    assert get_option_content_type(opt) == "text"
    assert get_localized_option_text(opt, "sl") == "Pes"
    assert get_localized_option_text(opt, "hr") == "Dog"
    assert get_localized_option_text(opt) == "Dog"


def test_content_wins_over_legacy_fields():
    opt = OptionIn(text="old", content=OptionTextContent(text="new", text_hr="novo"))
    assert has_content_system(opt)
    assert get_localized_option_text(opt, "en") == "new"
    assert get_localized_option_text(opt, "hr") == "novo"


def test_empty_option_text_is_empty_string():
    assert get_localized_option_text(OptionIn(), "sl") == ""


def test_image_url_only_for_mixed_content():
    mixed = create_mixed_option("Cat", "https://img.example/cat.png")
    assert get_option_content_type(mixed) == "mixed"
    assert get_option_image_url(mixed) == "https://img.example/cat.png"
    assert option_has_image(mixed)
    assert get_option_image_url(OptionIn(text="Cat")) is None
    assert get_option_image_url(OptionIn(content=OptionMixedContent(text="x"))) is None


def test_option_validity():
    assert is_valid_option(OptionIn(text_hr="Da"))
    assert not is_valid_option(OptionIn(text="   "))
    assert not is_valid_option(create_default_option())
    assert is_valid_option(OptionIn(content=OptionMixedContent(image_url="/a.png")))
    assert not is_valid_option(OptionIn(content=OptionMixedContent(text="", image_url="")))
    # legacy text is ignored once content is present
    assert not is_valid_option(OptionIn(text="legacy", content=OptionTextContent(text="")))


def test_legacy_and_content_conversion_preserve_values():
    legacy = OptionIn(id="3", text="A", text_sl=None, text_hr="", is_correct=True)
    converted = legacy_option_to_content(legacy)
    assert converted.content == OptionTextContent(text="A", text_sl=None, text_hr="")
    assert converted.is_correct is True
    back = content_to_legacy_option(converted)
    assert (back.text, back.text_sl, back.text_hr) == ("A", None, "")
    assert back.id == "3"


def test_conversion_leaves_other_shapes_unchanged():
    mixed = create_mixed_option("Cat", "/cat.png")
    assert legacy_option_to_content(mixed) is mixed
    assert content_to_legacy_option(mixed) is mixed


def test_wire_aliases_are_accepted():
    opt = OptionIn.model_validate({
        "id": "7",
        "isCorrect": True,
        "content": {"type": "mixed", "text_sl": "Mačka", "imageUrl": "/cat.png"},
    })
    assert opt.is_correct
    assert get_localized_option_text(opt, "sl") == "Mačka"
    assert get_option_image_url(opt) == "/cat.png"
