# tests/test_matcher.py
import logging

import pytest

from conftest import make_question
from french_tutor.matcher import count_blanks, match, normalize
from french_tutor.models import Variant


def test_normalize_trims_and_lowercases():
    assert normalize("  PaRiS ") == "paris"
    assert normalize(None) == ""


def test_count_blanks_supports_both_markers():
    assert count_blanks("[BLANK] et {blank} et [blank]") == 3
    assert count_blanks("no blanks here") == 0


# --- multiple choice ---


def test_multiple_choice_accepts_any_listed_option():
    q = make_question(correct_answer="Paris,paris")
    outcome = match(q, "  PARIS ")
    assert outcome.is_correct
    assert outcome.unit_results == (True,)
    assert outcome.raw_match_ratio == 1.0


def test_multiple_choice_wrong_option():
    q = make_question(correct_answer="Paris")
    outcome = match(q, "Lyon")
    assert not outcome.is_correct
    assert outcome.unit_results == (False,)
    assert outcome.raw_match_ratio == 0.0


def test_multiple_choice_no_other_normalization():
    """Accents and punctuation are significant."""
    q = make_question(correct_answer="café")
    assert not match(q, "cafe").is_correct
    assert not match(q, "café.").is_correct


def test_multiple_choice_empty_candidate():
    q = make_question(correct_answer="Paris")
    assert match(q, None).unit_results == (False,)
    assert match(q, "").unit_results == (False,)


# --- fill in the blank ---


def test_fill_blank_synonyms_per_blank(blank_question):
    outcome = match(blank_question, ["la", "chien"])
    assert outcome.is_correct
    assert outcome.unit_results == (True, True)


def test_fill_blank_case_and_whitespace(blank_question):
    assert match(blank_question, [" LE", "Chat  "]).is_correct


def test_fill_blank_missing_last_blank():
    q = make_question(Variant.FILL_BLANK, "le|petit|chat", prompt="[BLANK] [BLANK] [BLANK]")
    outcome = match(q, ["le", "petit"])
    assert outcome.unit_results == (True, True, False)
    assert outcome.raw_match_ratio == pytest.approx(2 / 3)
    assert not outcome.is_correct


def test_fill_blank_wrong_position_does_not_match(blank_question):
    outcome = match(blank_question, ["chat", "le"])
    assert outcome.unit_results == (False, False)


def test_fill_blank_blank_count_mismatch_fails_closed(caplog):
    q = make_question(Variant.FILL_BLANK, "le|chat", prompt="[BLANK] [BLANK] [BLANK] dort.")
    with caplog.at_level(logging.WARNING, logger="french_tutor.matcher"):
        outcome = match(q, ["le", "chat", "x"])
    assert outcome.unit_results == (False, False, False)
    assert not outcome.is_correct
    assert "malformed" in caplog.text


def test_fill_blank_without_markers_uses_group_count():
    q = make_question(Variant.FILL_BLANK, "suis|es", prompt="Conjugate être.")
    assert match(q, ["suis", "es"]).is_correct


def test_fill_blank_single_string_candidate():
    q = make_question(Variant.FILL_BLANK, "suis", prompt="Je [BLANK] ici.")
    assert match(q, "suis").is_correct


# --- drag and drop ---


DRAG_SPEC = {"dog": ["le chien"], "cat": ["le chat", "le matou"], "bird": "l'oiseau"}


def test_drag_drop_all_targets_correct():
    q = make_question(Variant.DRAG_DROP, DRAG_SPEC)
    outcome = match(q, {"dog": "le chien", "cat": "LE MATOU", "bird": " l'oiseau"})
    assert outcome.is_correct
    assert outcome.unit_results == (True, True, True)


def test_drag_drop_absent_target_counts_as_miss():
    q = make_question(Variant.DRAG_DROP, DRAG_SPEC)
    outcome = match(q, {"dog": "le chien", "cat": "le chat"})
    assert outcome.unit_results == (True, True, False)
    assert outcome.raw_match_ratio == pytest.approx(2 / 3)


def test_drag_drop_swapped_items():
    q = make_question(Variant.DRAG_DROP, DRAG_SPEC)
    outcome = match(q, {"dog": "le chat", "cat": "le chien", "bird": "l'oiseau"})
    assert outcome.unit_results == (False, False, True)


def test_drag_drop_non_mapping_spec_fails_closed():
    q = make_question(Variant.DRAG_DROP, "dog:le chien")
    outcome = match(q, {"dog": "le chien"})
    assert outcome.unit_results == (False,)


def test_drag_drop_non_mapping_candidate():
    q = make_question(Variant.DRAG_DROP, DRAG_SPEC)
    assert match(q, "").unit_results == (False, False, False)


# --- text input ---


def test_text_input_exact_match_any_alternative():
    q = make_question(Variant.TEXT_INPUT, "je m'appelle marie|mon nom est marie")
    outcome = match(q, "  Mon nom est Marie ")
    assert outcome.is_correct
    assert outcome.raw_match_ratio == 1.0


def test_text_input_identical_to_first_answer_ratio_is_one():
    q = make_question(Variant.TEXT_INPUT, "le le chat|autre")
    assert match(q, "le le chat").raw_match_ratio == 1.0


def test_text_input_seventy_percent_passes():
    q = make_question(Variant.TEXT_INPUT, "a b c d e f g h i j")
    outcome = match(q, "a b c d e f g x y z")
    assert outcome.raw_match_ratio == pytest.approx(0.70)
    assert outcome.is_correct
    assert outcome.unit_results == (True,)


def test_text_input_sixty_nine_percent_fails():
    q = make_question(Variant.TEXT_INPUT, "a b c d e f g h i j k l m")
    outcome = match(q, "a b c d e f g h i")
    assert outcome.raw_match_ratio == pytest.approx(9 / 13)
    assert outcome.raw_match_ratio < 0.70
    assert not outcome.is_correct
    assert outcome.unit_results == (False,)


def test_text_input_duplicates_counted_once():
    q = make_question(Variant.TEXT_INPUT, "je suis ici")
    outcome = match(q, "je je je")
    assert outcome.raw_match_ratio == pytest.approx(1 / 3)


def test_text_input_ratio_counts_repeated_answer_words():
    q = make_question(Variant.TEXT_INPUT, "je ne sais pas ce que je veux")
    outcome = match(q, "je ne sais pas ce")
    assert outcome.raw_match_ratio == pytest.approx(5 / 8)
    assert not outcome.is_correct
    assert outcome.missing_words == ("que", "veux")


def test_text_input_reports_missing_and_extra_words():
    q = make_question(Variant.TEXT_INPUT, "je suis à paris")
    outcome = match(q, "je suis en france")
    assert outcome.missing_words == ("à", "paris")
    assert outcome.extra_words == ("en", "france")


def test_text_input_custom_threshold():
    q = make_question(Variant.TEXT_INPUT, "a b c d")
    assert match(q, "a b", threshold=0.5).is_correct
    assert not match(q, "a b").is_correct


def test_text_input_empty_spec_fails_closed():
    q = make_question(Variant.TEXT_INPUT, " | ")
    assert match(q, "anything").unit_results == (False,)


# --- image based ---


def test_image_single_select():
    q = make_question(Variant.IMAGE_BASED, ["door"])
    assert match(q, "DOOR ").is_correct
    assert not match(q, "window").is_correct


def test_image_single_select_multiple_correct_regions():
    q = make_question(Variant.IMAGE_BASED, "door,gate")
    assert match(q, "gate").is_correct
    assert not match(q, ["door", "gate"]).is_correct


def test_image_multi_select_exact_set():
    q = make_question(Variant.IMAGE_BASED, ["r1", "r2"], selection_mode="click_regions")
    outcome = match(q, ["R2", "r1"])
    assert outcome.is_correct
    assert outcome.unit_results == (True, True)


def test_image_multi_select_extra_region_fails_everything():
    q = make_question(Variant.IMAGE_BASED, ["r1", "r2"], selection_mode="click_regions")
    outcome = match(q, ["r1", "r2", "r3"])
    assert not outcome.is_correct
    assert outcome.unit_results == (False, False)
    assert outcome.raw_match_ratio == 0.0


def test_image_multi_select_missing_region_is_partial():
    q = make_question(Variant.IMAGE_BASED, "r1,r2,r3", selection_mode="click_regions")
    outcome = match(q, ["r1", "r3"])
    assert outcome.unit_results == (True, False, True)
    assert not outcome.is_correct


def test_image_multi_select_nothing_selected():
    q = make_question(Variant.IMAGE_BASED, ["r1", "r2"], selection_mode="click_regions")
    assert match(q, []).unit_results == (False, False)


# --- shared conventions ---


@pytest.mark.parametrize("variant,spec,candidate,kwargs", [
    (Variant.MULTIPLE_CHOICE, "Bonsoir", "  bONSOIR\t", {}),
    (Variant.FILL_BLANK, "sommes", ["  SOMMES "], {"prompt": "Nous [BLANK]."}),
    (Variant.DRAG_DROP, {"dog": ["le chien"]}, {"dog": " Le Chien "}, {}),
    (Variant.TEXT_INPUT, "je suis ici", "JE SUIS ICI  ", {}),
    (Variant.IMAGE_BASED, ["door"], " Door", {}),
    (Variant.IMAGE_BASED, ["a", "b"], ["A ", " b"], {"selection_mode": "click_regions"}),
])
def test_every_variant_ignores_case_and_surrounding_whitespace(variant, spec, candidate, kwargs):
    q = make_question(variant, spec, **kwargs)
    assert match(q, candidate).is_correct


def test_unexpected_spec_type_fails_closed():
    q = make_question(Variant.MULTIPLE_CHOICE, 42)
    outcome = match(q, "42")
    assert outcome.unit_results == (False,)
