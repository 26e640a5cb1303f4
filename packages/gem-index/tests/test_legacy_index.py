# SPDX-License-Identifier: MIT
"""Tests for legacy specs index generation."""

import logging

from hypothesis import given, strategies as st

from gem_index.index import legacy
from gem_index.index.marshal import dumps_gzip, loads_gzip
from gem_index.models.record import PackageRecord


class TestLegacyIndex:
    """Tests for the specs, latest_specs and prerelease_specs builders."""

    def test_empty_specs(self):
        assert loads_gzip(legacy.build_empty_specs()) == []

    def test_specs_lists_every_release_in_order(self, make_record):
        records = [
            make_record("bar", "2.0"),
            make_record("foo", "1.10.0"),
            make_record("foo", "1.2.0", "java"),
        ]
        assert loads_gzip(legacy.build_specs(records)) == [
            ["bar", "2.0", "ruby"],
            ["foo", "1.10.0", "ruby"],
            ["foo", "1.2.0", "java"],
        ]

    def test_latest_specs_matches_full_index(self, make_record):
        records = [make_record("foo", "1.0"), make_record("foo", "2.0")]
        assert legacy.build_latest_specs(records) == legacy.build_specs(records)

    def test_prerelease_specs_always_empty(self, make_record):
        records = [make_record("foo", "2.0.0.rc1")]
        assert loads_gzip(legacy.build_prerelease_specs(records)) == []

    def test_generation_is_deterministic(self, make_record):
        records = [make_record("foo", "1.0")]
        assert legacy.build_specs(records) == legacy.build_specs(list(records))

    def test_encoding_failure_falls_back_to_empty(self, caplog):
        with caplog.at_level(logging.ERROR, logger="gem_index"):
            data = legacy.encode_specs([["foo", object(), "ruby"]])

        assert loads_gzip(data) == []
        assert "serving empty index" in caplog.text


records = st.lists(
    st.builds(
        PackageRecord,
        name=st.from_regex(r"[a-z][a-z0-9_-]{0,10}", fullmatch=True),
        version=st.lists(st.integers(min_value=0, max_value=99), min_size=1, max_size=4).map(
            lambda parts: ".".join(map(str, parts))
        ),
        platform=st.sampled_from(["ruby", "java", "x86_64-linux"]),
    ),
    max_size=15,
)


@given(records=records)
def test_decoded_specs_reencode_to_identical_bytes(records):
    data = legacy.build_specs(records)
    assert dumps_gzip(loads_gzip(data)) == data
