# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

import random
import unittest

from folio.core.errors import LayoutError
from folio.documents.kinds import BreakPolicy
from folio.render.blocks import BlockType
from folio.render.planner import plan
from tests.test_support import measured


class TestPlanner(unittest.TestCase):
    def test_capacity_must_be_positive(self) -> None:
        with self.assertRaisesRegex(LayoutError, "no room for content") as ctx:
            plan([measured(0, 10)], 100, 60, 40, document_number="INV-1")
        self.assertEqual(ctx.exception.kind, "layout")
        self.assertEqual(ctx.exception.document_number, "INV-1")

    def test_greedy_fill(self) -> None:
        blocks = [measured(index, 40) for index in range(5)]
        result = plan(blocks, 130, 20, 10)

        self.assertEqual(result.capacity, 100)
        self.assertEqual(result.block_indices(), ((0, 1), (2, 3), (4,)))
        self.assertEqual(result.page_count, 3)

    def test_empty_input_yields_single_empty_page(self) -> None:
        result = plan([], 100, 0, 0)
        self.assertEqual(result.block_indices(), ((),))

    def test_always_break_starts_new_page_despite_room(self) -> None:
        blocks = [
            measured(0, 10, block_type=BlockType.SECTION_HEADER, break_before=BreakPolicy.NEVER),
            measured(1, 10),
            measured(
                2,
                10,
                block_type=BlockType.SECTION_HEADER,
                group=1,
                break_before=BreakPolicy.ALWAYS,
            ),
            measured(3, 10, group=1),
        ]
        result = plan(blocks, 1000, 0, 0)
        self.assertEqual(result.block_indices(), ((0, 1), (2, 3)))

    def test_always_break_on_first_block_does_not_leave_blank_page(self) -> None:
        blocks = [measured(0, 10, break_before=BreakPolicy.ALWAYS), measured(1, 10)]
        self.assertEqual(plan(blocks, 100, 0, 0).block_indices(), ((0, 1),))

    def test_preferred_break_moves_whole_section_when_it_fits_a_page(self) -> None:
        blocks = [
            measured(0, 60, group=0),
            measured(
                1,
                10,
                block_type=BlockType.SECTION_HEADER,
                group=1,
                break_before=BreakPolicy.PREFERRED,
            ),
            measured(2, 20, group=1),
            measured(3, 20, group=1),
        ]
        result = plan(blocks, 100, 0, 0)
        self.assertEqual(result.block_indices(), ((0,), (1, 2, 3)))

    def test_preferred_break_ignored_when_section_exceeds_a_page(self) -> None:
        blocks = [
            measured(0, 60, group=0),
            measured(
                1,
                10,
                block_type=BlockType.SECTION_HEADER,
                group=1,
                break_before=BreakPolicy.PREFERRED,
            ),
            measured(2, 20, group=1),
            measured(3, 90, group=1),
        ]
        result = plan(blocks, 100, 0, 0)
        self.assertEqual(result.block_indices(), ((0, 1, 2), (3,)))

    def test_keep_with_next_header_is_never_orphaned(self) -> None:
        blocks = [
            measured(0, 70),
            measured(1, 10, block_type=BlockType.SUBSECTION_HEADER, keep_with_next=True),
            measured(2, 30),
        ]
        result = plan(blocks, 100, 0, 0)
        self.assertEqual(result.block_indices(), ((0,), (1, 2)))

    def test_last_row_travels_with_its_total(self) -> None:
        blocks = [
            measured(0, 40),
            measured(1, 40, keep_with_next=True),
            measured(2, 30, block_type=BlockType.SECTION_TOTAL),
        ]
        result = plan(blocks, 100, 0, 0)
        self.assertEqual(result.block_indices(), ((0,), (1, 2)))

    def test_oversized_block_gets_own_page_and_is_flagged(self) -> None:
        blocks = [measured(0, 40), measured(1, 250), measured(2, 40)]
        with self.assertLogs("folio.render.planner", level="WARNING") as logs:
            result = plan(blocks, 100, 0, 0, document_number="INV-9")

        self.assertEqual(result.block_indices(), ((0,), (1,), (2,)))
        self.assertTrue(result.pages[1].placements[0].overflowed)
        self.assertTrue(result.pages[1].has_overflow)
        self.assertFalse(result.pages[0].has_overflow)
        self.assertIn("INV-9", logs.output[0])

    def test_placeholder_blocks_are_marked_overflowed(self) -> None:
        result = plan([measured(0, 10, placeholder=True)], 100, 0, 0)
        self.assertTrue(result.pages[0].placements[0].overflowed)

    def test_chrome_repeats_from_second_page(self) -> None:
        result = plan([measured(index, 60) for index in range(3)], 100, 0, 0)
        self.assertEqual(
            [(page.number, page.repeated_header, page.repeated_column_titles) for page in result.pages],
            [(1, False, False), (2, True, True), (3, True, True)],
        )

    def test_pages_never_exceed_capacity_without_overflow(self) -> None:
        rng = random.Random(7)
        blocks = [measured(index, rng.randint(5, 60)) for index in range(200)]
        result = plan(blocks, 300, 40, 20)
        for page in result.pages:
            with self.subTest(page=page.number):
                self.assertLessEqual(page.content_height, result.capacity)

    def test_plan_is_deterministic_atomic_and_ordered(self) -> None:
        rng = random.Random(11)
        blocks = []
        for index in range(120):
            kind = rng.choice([BlockType.ROW, BlockType.ROW, BlockType.SECTION_HEADER])
            blocks.append(
                measured(
                    index,
                    rng.randint(5, 140),
                    block_type=kind,
                    group=index // 10,
                    keep_with_next=kind is BlockType.SECTION_HEADER,
                    break_before=rng.choice(list(BreakPolicy)),
                )
            )

        first = plan(blocks, 120, 10, 10)
        second = plan(blocks, 120, 10, 10)
        self.assertEqual(first, second)

        flattened = [index for page in first.block_indices() for index in page]
        self.assertEqual(flattened, list(range(len(blocks))))
        self.assertEqual(len(set(flattened)), len(blocks))


if __name__ == "__main__":
    unittest.main()
