"""
Tests for reduce_status and compatibility ranking.
"""

from compat_checker.models import AddonRecord
from compat_checker.status import BadgePolicy, classify, compatibility_rank, rank_addons, reduce_status
from compat_checker.status.reducer import ESR_ONLY_EXPERIMENT, RELEASE_INCOMPATIBLE, UNKNOWN

GREEN = "#27ae60"
RED = "#c0392b"


def record(addon_id, compat=None, **kwargs):
    return AddonRecord.model_validate({"id": addon_id, "name": addon_id, "compat": compat or [], **kwargs})


def release(ext_version="1.0", experiment=False):
    entry = {"type": "release", "isExperiment": experiment, "appVersion": "133.0"}
    if ext_version:
        entry["extVersion"] = ext_version
    return entry


def compatible():
    return record("ok", [release()])


def incompatible():
    return record("broken", [release(ext_version=None)])


def esr_only_experiment():
    return record("exp", [release(experiment=True)])


class TestClassify:

    def test_release_compatible_is_fine(self):
        assert classify(compatible()) is None

    def test_missing_release_entry_is_incompatible(self):
        assert classify(record("x", [{"type": "current-esr", "extVersion": "1"}])) == RELEASE_INCOMPATIBLE

    def test_release_without_version_is_incompatible(self):
        assert classify(incompatible()) == RELEASE_INCOMPATIBLE

    def test_experiment_without_dedicated_support(self):
        assert classify(esr_only_experiment()) == ESR_ONLY_EXPERIMENT

    def test_experiment_with_dedicated_support_is_fine(self):
        rec = record("exp", [release(experiment=True)], dedicatedSupportOnRelease=True)
        assert classify(rec) is None

    def test_unknown_record_counts_as_release_incompatible_first(self):
        # No compat entries at all: the release-incompatible rule wins
        assert classify(record("u", isUnknown=True)) == RELEASE_INCOMPATIBLE

    def test_unknown_with_release_data(self):
        assert classify(record("u", [release()], isUnknown=True)) == UNKNOWN


class TestReduceStatus:

    def test_empty_table_is_green_check(self):
        summary = reduce_status({})
        assert summary.badge_text == "✓"
        assert summary.badge_color == GREEN

    def test_all_compatible_is_green_check(self):
        summary = reduce_status({"ok": compatible()})
        assert (summary.badge_text, summary.badge_color) == ("✓", GREEN)

    def test_one_release_incompatible(self):
        summary = reduce_status({"ok": compatible(), "broken": incompatible()})
        assert summary.badge_text == "-1"
        assert summary.badge_color == RED
        assert summary.release_incompatible_count == 1

    def test_one_esr_only_experiment(self):
        summary = reduce_status({"exp": esr_only_experiment()})
        assert summary.badge_text == "✓"
        assert summary.badge_color == RED
        assert summary.esr_only_experiment_count == 1

    def test_esr_experiment_color_is_policy(self):
        policy = BadgePolicy(esr_experiment_color="#f39c12")
        summary = reduce_status({"exp": esr_only_experiment()}, policy)
        assert (summary.badge_text, summary.badge_color) == ("✓", "#f39c12")

    def test_counts_are_exclusive_and_summed(self):
        table = {
            "a": incompatible(),
            "b": record("b", isUnknown=True),
            "c": record("c", [release()], isUnknown=True),
            "d": esr_only_experiment(),
        }
        summary = reduce_status(table)
        assert summary.release_incompatible_count == 2
        assert summary.unknown_count == 1
        assert summary.esr_only_experiment_count == 1
        assert summary.badge_text == "-3"
        assert summary.badge_color == RED

    def test_to_dict(self):
        data = reduce_status({"broken": incompatible()}).to_dict()
        assert data == {
            "releaseIncompatibleCount": 1,
            "esrOnlyExperimentCount": 0,
            "unknownCount": 0,
            "badgeText": "-1",
            "badgeColor": RED,
        }


class TestRanking:

    def test_rank_weights(self):
        full = record("full", [
            {"type": "current-esr", "extVersion": "1"},
            {"type": "next-esr", "extVersion": "1"},
            release(),
        ])
        assert compatibility_rank(full) == 8 + 2 + 1

    def test_experiment_release_counts_half(self):
        assert compatibility_rank(esr_only_experiment()) == 4

    def test_dedicated_experiment_counts_full(self):
        rec = record("exp", [release(experiment=True)], dedicatedSupportOnRelease=True)
        assert compatibility_rank(rec) == 8

    def test_disabled_adds_weight(self):
        rec = record("off", [release(ext_version=None)], enabled=False)
        assert compatibility_rank(rec) == 16

    def test_rank_order_worst_first(self):
        table = {
            "ok": compatible(),
            "broken": incompatible(),
            "exp": esr_only_experiment(),
            "off": record("off", [release()], enabled=False),
        }
        ordered = [rec.id for rec, _ in rank_addons(table)]
        assert ordered == ["broken", "exp", "ok", "off"]

    def test_ties_sorted_by_name(self):
        table = {
            "z": record("z", name="Zeta"),
            "a": record("a", name="alpha"),
        }
        assert [rec.id for rec, _ in rank_addons(table)] == ["a", "z"]
