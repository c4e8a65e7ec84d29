import pytest

from gwscli.config import GmailConfig
from gwscli.guard import (GuardMode, PlaceholderBlocked, apply_signature, check_outbound, enforce,
                          find_placeholders)

BLOCK = GmailConfig()
WARN = GmailConfig(blockOnPlaceholders=False)
OFF = GmailConfig(warnOnPlaceholders=False, blockOnPlaceholders=False)


@pytest.mark.parametrize("text, token", [
    ("Hi [Your Name], thanks", "[Your Name]"),
    ("Dear {{first_name}},", "{{first_name}}"),
    ("Regards, __SENDER__", "__SENDER__"),
    ("Hello <<recipient>>", "<<recipient>>"),
    ("Hi {FIRST_NAME}!", "{FIRST_NAME}"),
    ("INSERT COMPANY NAME HERE please", "INSERT COMPANY NAME HERE"),
    ("Meeting on [insert date]", "[insert date]"),
])
def test_finds_placeholders(text, token):
    assert(find_placeholders(text) == [token])


def test_clean_text():
    assert(find_placeholders("Hi Sam, see [1] and {x} for details. Cheers") == [])
    assert(find_placeholders(None, "") == [])


def test_distinct_in_order():
    found = find_placeholders("[Company] news", "Dear {{name}}, from [Company]")
    assert(found == ["[Company]", "{{name}}"])


def test_modes():
    assert(GuardMode.from_config(BLOCK) == GuardMode.BLOCK)
    assert(GuardMode.from_config(WARN) == GuardMode.WARN)
    assert(GuardMode.from_config(OFF) == GuardMode.DISABLED)


def test_block():
    result = check_outbound(BLOCK, "Hello", "Hi [Your Name]")
    assert(not result)
    assert(result.blocked)
    assert(result.placeholders == ["[Your Name]"])
    with pytest.raises(PlaceholderBlocked) as e:
        enforce(BLOCK, "Hello", "Hi [Your Name]")
    assert("[Your Name]" in str(e.value))
    assert("--force" in str(e.value))


def test_subject_is_checked():
    assert(check_outbound(BLOCK, "Re: {{topic}}", "plain body").blocked)


def test_force_overrides():
    result = enforce(BLOCK, "Hello", "Hi [Your Name]", force=True)
    assert(result)
    assert(result.overridden)


def test_warn_and_disabled():
    result = enforce(WARN, "Hello", "Hi [Your Name]")
    assert(result)
    assert(result.placeholders == ["[Your Name]"])
    assert(not result.overridden)
    result = enforce(OFF, "Hello", "Hi [Your Name]")
    assert(result)
    assert(result.placeholders == [])


def test_signature():
    assert(apply_signature("Hi", "-- Sam") == "Hi\n\n-- Sam")
    assert(apply_signature("Hi\n\n-- Sam", "-- Sam") == "Hi\n\n-- Sam")
    assert(apply_signature("Hi", "") == "Hi")
    assert(apply_signature("Hi", None) == "Hi")
