import pytest

from woofeed.models.results import FieldIssue
from woofeed.spec.feed_spec import ALL_ATTRIBUTES, CATEGORY_CONFIG
from woofeed.sync.autofill import auto_fill_product
from woofeed.sync.scoring import DEFAULT_SCORING_CONFIG, ScoringConfig, compute_score, round_half_up
from woofeed.sync.validation import ProductContext, validate_product


def _all_but(*keep):
    return [a for a in ALL_ATTRIBUTES if a not in keep]


def test_weighting_example():
    # one Required field present, one Recommended field missing, the rest skipped
    result = compute_score({"title": "Trail Runner Shoe"}, skip_fields=_all_but("title", "color"))
    assert result.overall == 60
    assert result.grade == "Good"
    assert result.no_data_found is False
    assert result.passed_count == 1
    assert result.total_fields_checked == 2


def test_no_data_found():
    result = compute_score({})
    assert result.overall == 0
    assert result.grade == "Poor"
    assert result.no_data_found is True

    nothing = compute_score({a: None for a in ALL_ATTRIBUTES}, errors=[{"field": "title", "error": "x"}])
    assert nothing.no_data_found is True
    assert nothing.error_count == 1


def test_errors_earn_nothing_and_warnings_half():
    values = {"title": "T", "color": "Red"}
    skip = _all_but("title", "color")
    assert compute_score(values, skip_fields=skip).overall == 100

    with_warning = compute_score(values, warnings=[FieldIssue(field="color", error="too long")], skip_fields=skip)
    # 3 + 2 * 0.5 out of 5
    assert with_warning.overall == 80
    assert with_warning.grade == "Excellent"

    with_error = compute_score(values, errors=[{"field": "title", "error": "bad"}], skip_fields=skip)
    assert with_error.overall == 40
    assert with_error.grade == "Needs Work"


def test_every_category_is_reported_in_order():
    result = compute_score({"title": "T"})
    assert [c.key for c in result.category_scores] == list(CATEGORY_CONFIG)
    assert [c.order for c in result.category_scores] == sorted(c.order for c in result.category_scores)


def test_skipped_fields_are_listed_without_weight():
    result = compute_score({"title": "T"}, skip_fields=["material"])
    fields = {f.attribute: f for c in result.category_scores for f in c.fields}
    assert fields["material"].status == "skipped"
    assert fields["title"].status == "pass"
    assert fields["color"].status == "missing"
    assert len(fields) == len(ALL_ATTRIBUTES)


def test_missing_policy_is_configurable():
    lenient = ScoringConfig(missing_counts_against_total=False)
    assert compute_score({"title": "T"}, config=lenient).overall == 100
    assert compute_score({"title": "T"}).overall < 100


def test_custom_grades():
    config = ScoringConfig(grade_thresholds=((50, "Pass"),), floor_grade="Fail")
    result = compute_score({"title": "T"}, skip_fields=_all_but("title", "color"), config=config)
    assert result.grade == "Pass"
    assert config.grade(10) == "Fail"


def test_round_half_up():
    assert round_half_up(62.5) == 63
    assert round_half_up(62.4) == 62
    assert round_half_up(0.5) == 1


def test_default_weights_are_read_only():
    assert DEFAULT_SCORING_CONFIG.weight_for("Required") == 3.0
    assert DEFAULT_SCORING_CONFIG.weight_for("Conditional") == 1.5
    with pytest.raises(TypeError):
        DEFAULT_SCORING_CONFIG.weights["Required"] = 10
    assert DEFAULT_SCORING_CONFIG.weight_for("Required") == 3.0


def test_score_of_auto_filled_product(shop, simple_product, material_mappings):
    values = auto_fill_product(simple_product, shop, material_mappings)
    validation = validate_product(values, False, ProductContext.from_product(simple_product))
    result = compute_score(values, validation.errors, validation.warnings)
    assert result.no_data_found is False
    assert result.error_count == 0
    assert 0 < result.overall < 100
    basic = next(c for c in result.category_scores if c.key == "basic_product_data")
    assert basic.score > 0
