import math
import unittest

from alucut.core import CuttingOptimizer, OffcutPool, optimize_cutting
from alucut.exceptions import InvalidParametersError
from alucut.models import CutPiece, FitPolicy


def lengths(pieces):
    return [piece.length for piece in pieces]


class TestCuttingOptimizer(unittest.TestCase):
    def setUp(self):
        self.optimizer = CuttingOptimizer(FitPolicy.BEST_FIT)

    def test_empty_input(self):
        result = self.optimizer.optimize([], 600)
        self.assertEqual(result.pieces_needed, 0)
        self.assertEqual(result.remainders, [])
        self.assertEqual(result.detailed_cuts, [])
        self.assertEqual(result.efficiency, 0.0)

    def test_pieces_that_do_not_fit_in_offcuts(self):
        result = self.optimizer.optimize([500, 500, 500], 600)
        self.assertEqual(result.pieces_needed, 3)
        self.assertEqual(result.remainders, [100, 100, 100])
        self.assertEqual(len(result.cuts.from_new_profile), 3)
        self.assertEqual(result.cuts.from_remainders, [])

    def test_offcut_reuse(self):
        result = self.optimizer.optimize([200, 400], 600)
        self.assertEqual(result.pieces_needed, 1)
        self.assertEqual(result.remainders, [])
        self.assertEqual(lengths(result.cuts.from_new_profile), [400])
        self.assertEqual(lengths(result.cuts.from_remainders), [200])

    def test_expansion_with_remainder(self):
        result = self.optimizer.optimize([CutPiece(length=1000, piece_type="riel_principal")], 600)
        self.assertEqual(result.metadata["expanded_pieces"], 2)
        self.assertEqual(lengths(result.cuts.from_new_profile), [600, 400])
        self.assertEqual(
            [p.piece_type for p in result.cuts.from_new_profile],
            ["riel_principal_parte_1", "riel_principal_sobrante"],
        )
        self.assertEqual(result.pieces_needed, 2)
        self.assertEqual(result.remainders, [200])

    def test_expansion_exact_multiple(self):
        result = self.optimizer.optimize([1200], 600)
        self.assertEqual(lengths(result.cuts.from_new_profile), [600, 600])
        self.assertEqual(
            [p.piece_type for p in result.cuts.from_new_profile],
            ["pieza_parte_1", "pieza_parte_2"],
        )
        self.assertEqual(result.pieces_needed, 2)
        self.assertEqual(result.remainders, [])

    def test_no_piece_exceeds_stock_after_expansion(self):
        result = self.optimizer.optimize([1850.5, 90, 601], 600)
        all_pieces = result.cuts.from_new_profile + result.cuts.from_remainders
        self.assertTrue(all(piece.length <= 600 for piece in all_pieces))

    def test_piece_equal_to_stock_buys_a_bar(self):
        result = self.optimizer.optimize([600, 600, 50], 600)
        self.assertEqual(result.pieces_needed, 3)
        self.assertEqual(result.remainders, [550])

    def test_fixed_point_exact_fit(self):
        # 600 - 300.3 en coma flotante da 299.69999999999993
        result = self.optimizer.optimize([300.3, 299.7], 600)
        self.assertEqual(result.pieces_needed, 1)
        self.assertEqual(result.remainders, [])

    def test_lengths_snapped_to_hundredths(self):
        # 300.005 -> 300.01 y 299.995 -> 300.00: juntas pasan de 600
        result = self.optimizer.optimize([300.005, 299.995], 600)
        self.assertEqual(result.pieces_needed, 2)
        self.assertEqual(lengths(result.cuts.from_new_profile), [300.01, 300.0])
        self.assertEqual(result.remainders, [300.0, 299.99])
        self.assertAlmostEqual(
            result.pieces_needed * 600, result.total_cut_length + result.total_remainder_length, places=6
        )

    def test_conservation_with_three_decimals(self):
        pieces = [123.456, 98.765, 250.005, 0.015, 333.333, 599.999, 45.6789]
        result = self.optimizer.optimize(pieces, 600)
        purchased = result.pieces_needed * 600
        self.assertAlmostEqual(purchased, result.total_cut_length + result.total_remainder_length, places=6)
        traced = sum(trace.piece.length for profile in result.detailed_cuts for trace in profile.cuts)
        self.assertAlmostEqual(traced, result.total_cut_length, places=6)

    def test_conservation(self):
        pieces = [147.3, 147.3, 200, 91, 91, 91, 91, 350.5, 620, 45.25, 12.4, 599.9]
        result = self.optimizer.optimize(pieces, 600)
        purchased = result.pieces_needed * 600
        self.assertAlmostEqual(purchased, sum(pieces) + sum(result.remainders), places=6)
        self.assertAlmostEqual(result.total_cut_length, sum(pieces), places=6)

    def test_every_piece_cut_once_from_a_single_source(self):
        pieces = [147.3, 147.3, 200, 91, 91, 91, 91, 350.5, 45.25, 12.4, 300, 250]
        result = self.optimizer.optimize(pieces, 600)

        traced = [trace.piece for profile in result.detailed_cuts for trace in profile.cuts]
        self.assertEqual(len(traced), len(pieces))
        self.assertEqual(
            len(result.cuts.from_new_profile) + len(result.cuts.from_remainders), len(pieces)
        )

        for profile in result.detailed_cuts:
            available = 600.0
            for trace in profile.cuts:
                # Cada corte sale entero del sobrante anterior de la misma barra
                self.assertGreaterEqual(available + 1e-9, trace.piece.length)
                self.assertAlmostEqual(trace.remainder_after_cut, available - trace.piece.length, places=6)
                available = trace.remainder_after_cut

    def test_remainders_sorted_descending_and_positive(self):
        result = self.optimizer.optimize([100, 250, 330, 475, 50, 20], 600)
        self.assertEqual(result.remainders, sorted(result.remainders, reverse=True))
        self.assertTrue(all(r > 0 for r in result.remainders))

    def test_idempotent_and_order_independent(self):
        pieces = [147.3, 200, 91, 91, 350.5, 45.25, 12.4, 300, 250, 620]
        first = self.optimizer.optimize(pieces, 600)
        second = self.optimizer.optimize(pieces, 600)
        reversed_run = self.optimizer.optimize(list(reversed(pieces)), 600)

        for other in (second, reversed_run):
            self.assertEqual(other.pieces_needed, first.pieces_needed)
            self.assertEqual(other.remainders, first.remainders)

    def test_pieces_needed_never_decreases(self):
        pieces = [350, 120, 480, 75, 260, 600, 15, 330]
        previous = 0
        for n in range(len(pieces) + 1):
            needed = self.optimizer.optimize(pieces[:n], 600).pieces_needed
            self.assertGreaterEqual(needed, previous)
            previous = needed

    def test_fit_policies_differ_only_in_remainders(self):
        pieces = [500, 300, 250, 40]
        best = CuttingOptimizer(FitPolicy.BEST_FIT).optimize(pieces, 600)
        first = CuttingOptimizer(FitPolicy.FIRST_FIT).optimize(pieces, 600)

        self.assertEqual(best.pieces_needed, 2)
        self.assertEqual(first.pieces_needed, 2)
        self.assertEqual(best.remainders, [100, 10])
        self.assertEqual(first.remainders, [60, 50])
        self.assertEqual(best.fit_policy, FitPolicy.BEST_FIT)

    def test_detailed_cuts_numbering(self):
        result = self.optimizer.optimize([500, 500, 80], 600)
        self.assertEqual([p.profile_number for p in result.detailed_cuts], [1, 2])
        self.assertEqual(result.cuts.new_profiles_required, 2)
        self.assertEqual(result.detailed_cuts[0].cuts[0].remainder_after_cut, 100)
        self.assertEqual(result.detailed_cuts[0].cuts[1].piece.length, 80)

    def test_accepts_dicts(self):
        result = self.optimizer.optimize(
            [{"length": 250, "source_tag": "Ventana #1", "piece_type": "riel_principal"}], 600
        )
        self.assertEqual(result.cuts.from_new_profile[0].source_tag, "Ventana #1")

    def test_efficiency(self):
        result = self.optimizer.optimize([300, 150], 600)
        self.assertAlmostEqual(result.efficiency, 75.0)

    def test_invalid_stock_length(self):
        for stock in (0, -600, math.nan, math.inf, "abc", 0.001):
            with self.assertRaises(InvalidParametersError):
                self.optimizer.optimize([100], stock)

    def test_invalid_piece_lengths(self):
        for bad in ([0], [-5], [math.nan], [math.inf], [0.001], ["100"]):
            with self.assertRaises(InvalidParametersError):
                self.optimizer.optimize(bad, 600)

    def test_optimize_safe_never_raises(self):
        result = self.optimizer.optimize_safe([100, -1], 600)
        self.assertFalse(result.metadata["success"])
        self.assertIn("error", result.metadata)
        self.assertEqual(result.pieces_needed, 0)

    def test_non_iterable_pieces(self):
        with self.assertRaises(InvalidParametersError):
            self.optimizer.optimize(5, 600)
        result = self.optimizer.optimize_safe(5, 600)
        self.assertFalse(result.metadata["success"])
        self.assertEqual(result.pieces_needed, 0)

    def test_module_shortcut(self):
        result = optimize_cutting([400, 200], 600, FitPolicy.FIRST_FIT)
        self.assertEqual(result.pieces_needed, 1)
        self.assertEqual(result.fit_policy, FitPolicy.FIRST_FIT)


class TestOffcutPool(unittest.TestCase):
    def test_put_ignores_empty_offcuts(self):
        pool = OffcutPool()
        pool.put(0, 1)
        pool.put(-10, 1)
        self.assertEqual(len(pool), 0)

    def test_best_fit_prefers_smallest_then_earliest(self):
        pool = OffcutPool(FitPolicy.BEST_FIT)
        pool.put(300, 1)
        pool.put(120, 2)
        pool.put(120, 3)
        offcut = pool.take(100)
        self.assertEqual((offcut.length, offcut.profile_number), (120, 2))
        self.assertEqual(pool.lengths(), [300, 120])

    def test_first_fit_takes_pool_order(self):
        pool = OffcutPool(FitPolicy.FIRST_FIT)
        pool.put(300, 1)
        pool.put(120, 2)
        self.assertEqual(pool.take(100).length, 300)

    def test_take_returns_none_when_nothing_fits(self):
        pool = OffcutPool()
        pool.put(99, 1)
        self.assertIsNone(pool.take(100))
        self.assertEqual(len(pool), 1)


if __name__ == "__main__":
    unittest.main()
