"""
Unit tests for the deduplication engine.
"""
import pytest

from hunt.dedupe import (
    RULE_EXACT,
    RULE_FUZZY,
    RULE_SUBSTRING,
    RULE_URL,
    DedupeEngine,
    find_duplicate,
    find_duplicate_match,
    find_duplicates,
    jaro,
    jaro_winkler,
)
from hunt.models import ExistingRecordView as R
from hunt.models import ParsedJob


def test_jaro_winkler_reference_values():
    assert jaro("martha", "marhta") == pytest.approx(0.9444, abs=1e-3)
    assert jaro_winkler("martha", "marhta") == pytest.approx(0.9611, abs=1e-3)
    assert jaro("dixon", "dicksonx") == pytest.approx(0.7667, abs=1e-3)
    assert jaro_winkler("dixon", "dicksonx") == pytest.approx(0.8133, abs=1e-3)


def test_jaro_winkler_no_boost_for_low_scores():
    """A shared prefix must not lift a weak Jaro score over the cutoff."""
    assert jaro_winkler("data engineer", "data architect") == pytest.approx(0.6873, abs=1e-3)
    assert jaro_winkler("data analyst", "data architect") == pytest.approx(0.6944, abs=1e-3)
    assert jaro_winkler("data analyst", "data architect") == jaro("data analyst", "data architect")


def test_jaro_half_transpositions_rounded_down():
    # 17 out-of-order matches count as 8 transpositions
    assert jaro("senior software engineer", "sr. software engineer") == pytest.approx(0.7952, abs=1e-3)
    assert jaro_winkler("senior software engineer", "sr. software engineer") == pytest.approx(0.8157, abs=1e-3)


def test_distinct_roles_same_employer_not_duplicate():
    corpus = [R(1, "Data Engineer", "Acme")]
    assert find_duplicate(ParsedJob("Data Architect", employer="Acme"), corpus) is None


def test_find_duplicates_keeps_distinct_roles():
    records = [R(1, "Data Analyst", "Acme"), R(2, "Data Architect", "Acme")]
    assert find_duplicates(records) == []


def test_jaro_edge_cases():
    assert jaro("", "") == 1.0
    assert jaro("abc", "") == 0.0
    assert jaro("abc", "xyz") == 0.0


def test_exact_title_same_employer():
    corpus = [R(1, "Staff DevOps Engineer", "Wiraa")]
    match = find_duplicate_match(ParsedJob("Staff DevOps Engineer", employer="Wiraa"), corpus)
    assert match.existing_id == 1
    assert match.rule == RULE_EXACT


def test_substring_title_same_employer():
    corpus = [R(1, "Staff DevOps Engineer, DevInfra", "Wiraa")]
    match = find_duplicate_match(ParsedJob("Staff DevOps Engineer", employer="Wiraa"), corpus)
    assert match.rule == RULE_SUBSTRING


def test_fuzzy_title_same_employer():
    """Test that 'Sr.' and 'Senior' variants clear the similarity threshold."""
    corpus = [R(1, "Senior Software Engineer", "Acme Corp")]
    match = find_duplicate_match(ParsedJob("Sr. Software Engineer", employer="Acme Corp"), corpus)
    assert match.existing_id == 1
    assert match.rule == RULE_FUZZY


def test_different_employers_not_duplicate():
    corpus = [R(1, "Software Engineer", "Company A")]
    assert find_duplicate(ParsedJob("Software Engineer", employer="Company B"), corpus) is None


def test_unrelated_titles_not_duplicate():
    corpus = [R(1, "Data Scientist", "Acme")]
    assert find_duplicate(ParsedJob("Product Manager", employer="Acme"), corpus) is None


def test_url_match_overrides_title():
    """Test that URL identity wins even with a different title and employer."""
    corpus = [R(1, "Job Title A", "Company A", "https://example.com/job/123")]
    candidate = ParsedJob("Job Title B", employer="Company B", url="https://example.com/job/123")
    match = find_duplicate_match(candidate, corpus)
    assert match.existing_id == 1
    assert match.rule == RULE_URL


def test_url_rule_checked_before_title_rules():
    corpus = [
        R(1, "DevOps Engineer", "Acme"),
        R(2, "Something Else", "Other", "https://example.com/job/9"),
    ]
    candidate = ParsedJob("DevOps Engineer", employer="Acme", url="https://example.com/job/9")
    assert find_duplicate(candidate, corpus) == 2


def test_tracking_params_do_not_defeat_url_rule():
    corpus = [R(1, "Job A", None, "https://www.linkedin.com/jobs/view/123")]
    candidate = ParsedJob("Job B", url="https://www.linkedin.com/jobs/view/123?trackingId=xyz")
    assert find_duplicate(candidate, corpus) == 1


def test_case_insensitive_matching():
    corpus = [R(1, "DevOps Engineer", "Wiraa")]
    assert find_duplicate(ParsedJob("devops engineer", employer="WIRAA"), corpus) == 1


def test_missing_employer_disables_title_rules():
    corpus = [R(1, "DevOps Engineer", "Wiraa"), R(2, "DevOps Engineer", None)]
    assert find_duplicate(ParsedJob("DevOps Engineer"), corpus) is None
    assert find_duplicate(ParsedJob("DevOps Engineer", employer="Wiraa"), [corpus[1]]) is None


def test_empty_corpus():
    assert find_duplicate(ParsedJob("DevOps Engineer", employer="Wiraa"), []) is None


def test_find_duplicates_one_pair():
    """Test the corpus scan reports the later same-employer copy only."""
    records = [
        R(1, "DevOps Engineer", "Wiraa"),
        R(2, "DevOps Engineer", "Wiraa"),
        R(3, "DevOps Engineer", "Other Company"),
    ]
    pairs = find_duplicates(records)
    assert len(pairs) == 1
    assert (pairs[0].original_id, pairs[0].duplicate_id) == (1, 2)
    assert pairs[0].rule == RULE_EXACT


def test_find_duplicates_first_match_not_transitive():
    """Test that flagged records are skipped as originals and each record reports once."""
    records = [
        R(1, "Platform Engineer", "Acme"),
        R(2, "Platform Engineer II", "Acme"),
        R(3, "Platform Engineer II", "Acme"),
    ]
    pairs = find_duplicates(records)
    assert [(p.original_id, p.duplicate_id) for p in pairs] == [(1, 2), (1, 3)]


def test_find_duplicates_uses_url_rule():
    records = [
        R(1, "Role One", "A", "https://example.com/1"),
        R(2, "Role Two", "B", "https://example.com/1"),
    ]
    pairs = find_duplicates(records)
    assert len(pairs) == 1
    assert pairs[0].rule == RULE_URL


def test_find_duplicates_empty():
    assert find_duplicates([]) == []


def test_engine_batch_admission():
    """Test that accepted candidates are visible to later candidates in the batch."""
    engine = DedupeEngine([R(7, "Data Engineer", "Initech")])
    jobs = [
        ParsedJob("DevOps Engineer", employer="Acme", url="https://example.com/1"),
        ParsedJob("devops engineer", employer="ACME"),
        ParsedJob("Totally Different", employer="Other", url="https://example.com/1?utm_source=x"),
        ParsedJob("Data Engineer", employer="Initech"),
        ParsedJob("QA Analyst", employer="Acme"),
    ]
    result = engine.dedupe(jobs)
    assert [j.title for j in result.unique_jobs] == ["DevOps Engineer", "QA Analyst"]
    assert result.duplicates_removed == 3
    assert result.duplicates_by_url == 1
    assert result.duplicates_by_title == 2
    assert result.matches[-1][1].existing_id == 7


def test_engine_admit_assigns_temporary_ids():
    engine = DedupeEngine()
    first = engine.admit(ParsedJob("SRE Lead", employer="Acme"))
    second = engine.admit(ParsedJob("Data Lead", employer="Acme"), record_id=42)
    assert first.id < 0
    assert second.id == 42
    assert engine.check(ParsedJob("sre lead", employer="acme")).existing_id == first.id
    engine.clear()
    assert engine.check(ParsedJob("sre lead", employer="acme")) is None
