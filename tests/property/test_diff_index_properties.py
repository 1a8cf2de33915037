"""
Property-based tests for diff parsing and position indexing.

Property 1: Position Index Determinism and Monotonicity
"""

from hypothesis import given, strategies as st

from draft_reviewer.github.parser import UnifiedDiffParser
from draft_reviewer.models.pr_diff import LineKind, Side


line_kinds = st.lists(st.sampled_from([' ', '+', '-']), min_size=1, max_size=12)

file_layouts = st.lists(
    st.tuples(
        st.integers(min_value=1, max_value=20),   # gap before the hunk
        line_kinds,
    ),
    min_size=1,
    max_size=4,
)

diff_layouts = st.dictionaries(
    keys=st.sampled_from(['a.py', 'src/b.py', 'docs/c d.md', 'lib/x b/y.py']),
    values=file_layouts,
    min_size=1,
    max_size=4,
)


def render_diff(layout):
    """Render a generated layout into unified diff text."""
    out = []
    for path, hunks in layout.items():
        out.append(f"diff --git a/{path} b/{path}")
        out.append(f"--- a/{path}")
        out.append(f"+++ b/{path}")
        old_next = new_next = 1
        for gap, kinds in hunks:
            old_start = old_next + gap
            new_start = new_next + gap
            old_count = sum(1 for k in kinds if k != '+')
            new_count = sum(1 for k in kinds if k != '-')
            out.append(f"@@ -{old_start},{old_count} +{new_start},{new_count} @@")
            for i, kind in enumerate(kinds):
                out.append(f"{kind}line {i}")
            old_next = old_start + old_count
            new_next = new_start + new_count
    return "\n".join(out) + "\n"


class TestDiffIndexProperties:
    """Property tests for UnifiedDiffParser."""

    @given(layout=diff_layouts)
    def test_parsing_is_deterministic(self, layout):
        """
        Property: Re-parsing identical diff text yields an identical index.
        """
        diff_text = render_diff(layout)
        parser = UnifiedDiffParser()

        assert parser.parse(diff_text) == parser.parse(diff_text)
        assert parser.index(diff_text) == UnifiedDiffParser().index(diff_text)

    @given(layout=diff_layouts)
    def test_positions_increase_by_one(self, layout):
        """
        Property: Positions start at 1 and increase by exactly one per
        visited diff line, every hunk header included.
        """
        document = UnifiedDiffParser().parse(render_diff(layout))

        for file_diff in document:
            positions = []
            for hunk in file_diff.hunks:
                positions.append(hunk.header_position)
                positions.extend(line.position for line in hunk.lines)

            assert positions == list(range(1, len(positions) + 1))

    @given(layout=diff_layouts)
    def test_only_new_file_lines_indexed(self, layout):
        """
        Property: Exactly the context and added lines receive an entry,
        all on the RIGHT side, and no removed line's position is used.
        """
        parser = UnifiedDiffParser()
        document = parser.parse(render_diff(layout))
        index = parser.build_index(document)

        assert set(index.files) == set(layout)

        for file_diff in document:
            entries = index.lines_for(file_diff.path)
            lines = [line for hunk in file_diff.hunks for line in hunk.lines]
            kept = [line for line in lines if line.kind != LineKind.REMOVED]
            removed_positions = {line.position for line in lines if line.kind == LineKind.REMOVED}

            assert len(entries) == len(kept)
            assert all(entry.side == Side.RIGHT for entry in entries.values())
            assert not removed_positions & {entry.position for entry in entries.values()}
            for line in kept:
                assert entries[line.new_line].position == line.position
