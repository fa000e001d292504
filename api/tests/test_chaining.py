"""Tests for chain linking and greedy chain assembly."""
import math
import random
from datetime import datetime, timedelta

import pytest

from photo_grouping.chaining import build_chains, check_link
from photo_grouping.config import GroupingConfig
from photo_grouping.models import Cluster, FaceDetection, PhotoRecord


T0 = datetime(2024, 1, 1, 12, 0, 0)
ONE_WEEK = timedelta(days=7)
ONE_YEAR = timedelta(days=365)


def _direction(degrees: float) -> list[float]:
    """2-d unit embedding; cos(12 deg) ~ 0.978 clears the 0.97 threshold, cos(24 deg) does not."""
    radians = math.radians(degrees)
    return [math.cos(radians), math.sin(radians)]


def _mixed(name: str, start: datetime, embedding, span: timedelta = timedelta(minutes=5)) -> Cluster:
    """Face photo at ``start``, non-face photo ``span`` later."""
    return Cluster(photos=(
        PhotoRecord(path=f"{name}-face", timestamp=start,
                    detection=FaceDetection.face(embedding, 0.9)),
        PhotoRecord(path=f"{name}-plain", timestamp=start + span,
                    detection=FaceDetection.no_face()),
    ))


def _pair_with_gap(gap: timedelta, similarity_angle: float = 0.0) -> tuple[Cluster, Cluster]:
    before = _mixed("before", T0, _direction(0))
    # before ends 5 minutes after T0; after starts `gap` later
    after = _mixed("after", before.end + gap, _direction(similarity_angle))
    return before, after


class TestCheckLink:
    """Tests for the link test between two clusters."""

    def test_similar_faces_ten_days_apart_link(self):
        before = _mixed("a", T0, [1.0, 0.0])
        after = _mixed("b", T0 + timedelta(days=10), [0.98, math.sqrt(1 - 0.98 ** 2)])

        result = check_link(before, after)

        assert result.linked is True
        assert result.reason == "linked"
        assert result.similarity == pytest.approx(0.98)

    def test_gap_of_two_days_does_not_link(self):
        before, after = _pair_with_gap(timedelta(days=2))

        result = check_link(before, after)

        assert result.linked is False
        assert result.reason == "gap_too_short"
        assert result.similarity is None

    def test_gap_of_exactly_one_week_links(self):
        before, after = _pair_with_gap(ONE_WEEK)
        assert check_link(before, after).linked is True

    def test_gap_just_under_one_week_does_not_link(self):
        before, after = _pair_with_gap(ONE_WEEK - timedelta(milliseconds=1))

        result = check_link(before, after)

        assert result.linked is False
        assert result.reason == "gap_too_short"

    def test_gap_of_exactly_one_year_links(self):
        before, after = _pair_with_gap(ONE_YEAR)
        assert check_link(before, after).linked is True

    def test_gap_just_over_one_year_does_not_link(self):
        before, after = _pair_with_gap(ONE_YEAR + timedelta(milliseconds=1))

        result = check_link(before, after)

        assert result.linked is False
        assert result.reason == "gap_too_long"

    def test_after_before_before_does_not_link(self):
        before, after = _pair_with_gap(ONE_WEEK)
        assert check_link(after, before).reason == "gap_too_short"

    def test_gap_counts_non_face_photos(self):
        """The window runs from the last photo of any kind, not the last face photo."""
        before = _mixed("a", T0, _direction(0), span=timedelta(days=2))
        # 8 days after the face photo but only 6 after the non-face photo
        after = _mixed("b", T0 + timedelta(days=8), _direction(0))

        assert check_link(before, after).reason == "gap_too_short"

    def test_requires_faces_on_both_sides(self):
        before = _mixed("a", T0, _direction(0))
        no_faces = Cluster(photos=(
            PhotoRecord(path="plain", timestamp=T0 + timedelta(days=10),
                        detection=FaceDetection.no_face()),
        ))

        result = check_link(before, no_faces)

        assert result.linked is False
        assert result.reason == "no_face_evidence"
        assert result.similarity is None

    def test_below_threshold(self):
        before, after = _pair_with_gap(timedelta(days=10), similarity_angle=24)

        result = check_link(before, after)

        assert result.linked is False
        assert result.reason == "below_threshold"
        assert result.similarity == pytest.approx(math.cos(math.radians(24)))

    def test_mismatched_embedding_lengths_do_not_crash(self):
        before = _mixed("a", T0, [1.0, 0.0, 0.0])
        after = _mixed("b", T0 + timedelta(days=10), [1.0, 0.0])

        result = check_link(before, after)

        assert result.linked is False
        assert result.similarity == 0.0

    def test_non_finite_embedding_does_not_link(self):
        before = _mixed("a", T0, [float("nan"), 0.0])
        after = _mixed("b", T0 + timedelta(days=10), [0.0, 1.0])

        result = check_link(before, after)

        assert result.linked is False
        assert result.reason == "below_threshold"
        assert result.similarity == 0.0

    def test_custom_threshold(self):
        before, after = _pair_with_gap(timedelta(days=10), similarity_angle=24)
        config = GroupingConfig(similarity_threshold=0.9)

        assert check_link(before, after, config).linked is True


class TestBuildChains:
    """Tests for greedy chain assembly."""

    def test_empty_input(self):
        assert build_chains([]) == []

    def test_single_cluster_is_own_chain(self):
        cluster = _mixed("a", T0, _direction(0))

        chains = build_chains([cluster])

        assert len(chains) == 1
        assert chains[0].clusters == [cluster]
        assert chains[0].similarities == []

    def test_links_follow_last_cluster(self):
        """Each candidate is compared with the chain's last cluster, not its first."""
        clusters = [
            _mixed("c1", T0, _direction(0)),
            _mixed("c2", T0 + timedelta(days=10), _direction(12)),
            _mixed("c3", T0 + timedelta(days=20), _direction(24)),
        ]

        chains = build_chains(clusters)

        assert len(chains) == 1
        assert chains[0].clusters == clusters
        assert chains[0].similarities == pytest.approx([math.cos(math.radians(12))] * 2)

    def test_first_match_wins(self):
        """Cluster 1 links to 3 and 5; 3 is claimed first, so 5 starts its own chain."""
        clusters = [
            _mixed("c1", T0, _direction(0)),
            _mixed("c2", T0 + timedelta(days=10), _direction(90)),
            _mixed("c3", T0 + timedelta(days=20), _direction(12)),
            _mixed("c4", T0 + timedelta(days=30), _direction(180)),
            _mixed("c5", T0 + timedelta(days=40), _direction(-12)),
        ]
        assert check_link(clusters[0], clusters[4]).linked is True

        chains = build_chains(clusters)

        assert [c.clusters for c in chains] == [
            [clusters[0], clusters[2]],
            [clusters[1]],
            [clusters[3]],
            [clusters[4]],
        ]

    def test_claimed_cluster_not_reconsidered(self):
        """A later chain cannot take a cluster even if it would match better."""
        clusters = [
            _mixed("c1", T0, _direction(0)),
            _mixed("c2", T0 + timedelta(days=1), _direction(14)),
            _mixed("c3", T0 + timedelta(days=10), _direction(13)),
        ]

        chains = build_chains(clusters)

        # c3 is nearly identical to c2 but c1 also clears the threshold and claims it first
        assert chains[0].clusters == [clusters[0], clusters[2]]
        assert chains[1].clusters == [clusters[1]]

    def test_chain_ids_unique_and_ordered(self):
        clusters = [_mixed(f"c{i}", T0 + timedelta(days=i), _direction(i * 45)) for i in range(5)]

        chains = build_chains(clusters)

        assert [c.id for c in chains] == list(range(1, len(chains) + 1))

    def test_chains_partition_clusters(self):
        rng = random.Random(11)
        clusters = [
            _mixed(f"c{i}", T0 + timedelta(days=i * rng.uniform(3, 40)), _direction(rng.choice([0, 5, 10, 60])))
            for i in range(30)
        ]
        clusters.sort(key=lambda c: c.start)

        chains = build_chains(clusters)

        seen = [id(c) for chain in chains for c in chain.clusters]
        assert len(seen) == len(clusters)
        assert set(seen) == {id(c) for c in clusters}

    def test_chain_links_satisfy_link_test(self):
        rng = random.Random(5)
        clusters = [
            _mixed(f"c{i}", T0 + timedelta(days=i * 9), _direction(rng.choice([0, 8, 30])))
            for i in range(20)
        ]

        for chain in build_chains(clusters):
            for before, after in zip(chain.clusters, chain.clusters[1:]):
                assert check_link(before, after).linked
                assert after.start > before.end
