"""Tests for Game — the per-ply orchestrator."""

import chess
import pytest

from enginematch.core.enums import TerminationCode
from enginematch.core.rules import STARTING_FEN, Rules
from enginematch.engine.search import SearchLimits
from enginematch.game.controller import Game
from enginematch.game.interfaces import AdjudicationConfig, GameOptions, TimeControl

SCHOLAR_WHITE = ["e2e4", "f1c4", "d1h5", "h5f7"]
SCHOLAR_BLACK = ["e7e5", "b8c6", "g8f6"]

# Knights out and back twice: the start position recurs at plies 4 and 8.
SHUFFLE_WHITE = ["g1f3", "f3g1", "g1f3", "f3g1"]
SHUFFLE_BLACK = ["g8f6", "f6g8", "g8f6", "f6g8"]


class TestRulesTermination:
    def test_checkmate(self, scripted_engine) -> None:
        white = scripted_engine("W", SCHOLAR_WHITE)
        black = scripted_engine("B", SCHOLAR_BLACK)
        game = Game()
        assert game.play((white, black)) == TerminationCode.CHECKMATE
        assert game.ply == 7
        assert game.result() == ("1-0", "checkmate")
        assert len(game.history) == game.ply + 1

    def test_stalemate_at_start(self, scripted_engine) -> None:
        a = scripted_engine("A", [])
        b = scripted_engine("B", [])
        game = Game("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
        assert game.play((a, b)) == TerminationCode.STALEMATE
        assert game.ply == 0
        assert game.result() == ("1/2-1/2", "stalemate")
        assert a.positions == [] and b.positions == []
        assert a.new_games == [False] and b.new_games == [False]

    def test_fifty_move_rule(self, scripted_engine) -> None:
        game = Game("8/8/8/8/8/5k2/8/R3K3 w - - 100 80")
        code = game.play((scripted_engine("A", []), scripted_engine("B", [])))
        assert code == TerminationCode.FIFTY_MOVE_RULE
        assert game.result() == ("1/2-1/2", "50 move rule")

    def test_mate_beats_fifty_move_rule(self, scripted_engine) -> None:
        # Back-rank mate delivered with the halfmove clock already at 100.
        game = Game("R5k1/5ppp/8/8/8/8/8/6K1 b - - 100 80")
        code = game.play((scripted_engine("A", []), scripted_engine("B", [])))
        assert code == TerminationCode.CHECKMATE

    def test_insufficient_material(self, scripted_engine) -> None:
        game = Game("8/8/8/8/8/5k2/8/4K3 w - - 0 1")
        code = game.play((scripted_engine("A", []), scripted_engine("B", [])))
        assert code == TerminationCode.INSUFFICIENT_MATERIAL
        assert game.result() == ("1/2-1/2", "insufficient material")

    def test_threefold_repetition(self, scripted_engine) -> None:
        white = scripted_engine("W", SHUFFLE_WHITE)
        black = scripted_engine("B", SHUFFLE_BLACK)
        game = Game()
        assert game.play((white, black)) == TerminationCode.THREEFOLD_REPETITION
        assert game.ply == 8
        assert game.result() == ("1/2-1/2", "3 repetitions")

    def test_repetition_scan_stops_at_first_ply(self, scripted_engine) -> None:
        # The halfmove clock exceeds the plies played, so the scan must not
        # look back past the start position.
        fen = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 60 30"
        white = scripted_engine("W", SHUFFLE_WHITE)
        black = scripted_engine("B", SHUFFLE_BLACK)
        game = Game(fen)
        assert game.play((white, black)) == TerminationCode.THREEFOLD_REPETITION
        assert game.ply == 8
        assert len(game.history) == 9
        assert white.positions[1] == f"position fen {fen} moves g1f3 g8f6"


class TestEngineFaults:
    def test_illegal_move(self, scripted_engine) -> None:
        game = Game()
        code = game.play((scripted_engine("W", ["e2e5"]), scripted_engine("B", [])))
        assert code == TerminationCode.ILLEGAL_MOVE
        assert game.ply == 0
        assert game.result() == ("0-1", "illegal move")
        assert len(game.history) == 1

    def test_garbage_move(self, scripted_engine) -> None:
        game = Game()
        black = scripted_engine("B", ["xyz"])
        code = game.play((scripted_engine("W", ["e2e4"]), black))
        assert code == TerminationCode.ILLEGAL_MOVE
        assert game.result() == ("1-0", "illegal move")

    def test_time_loss(self, scripted_engine) -> None:
        game = Game()
        code = game.play((scripted_engine("W", [None]), scripted_engine("B", [])))
        assert code == TerminationCode.TIME_LOSS
        assert game.result() == ("0-1", "time forfeit")

    def test_flag_with_time_control(self, scripted_engine) -> None:
        white = scripted_engine("W", ["e2e4", "g1f3"], spent_ms=600)
        black = scripted_engine("B", ["e7e5", "b8c6"])
        options = GameOptions(time_control=TimeControl(1000))
        game = Game()
        # The second search overruns the remaining 400ms.
        assert game.play((white, black), options) == TerminationCode.TIME_LOSS
        assert game.ply == 2
        assert game.result() == ("0-1", "time forfeit")

    def test_play_twice(self, scripted_engine) -> None:
        game = Game()
        game.play((scripted_engine("W", [None]), scripted_engine("B", [])))
        with pytest.raises(RuntimeError):
            game.play((scripted_engine("W", []), scripted_engine("B", [])))


class TestAdjudication:
    def test_draw(self, scripted_engine) -> None:
        white = scripted_engine("W", SHUFFLE_WHITE)
        black = scripted_engine("B", SHUFFLE_BLACK)
        options = GameOptions(
            adjudication=AdjudicationConfig(draw_count=2, draw_score=10)
        )
        game = Game()
        assert game.play((white, black), options) == TerminationCode.DRAW_ADJUDICATION
        assert game.ply == 3
        assert game.result() == ("1/2-1/2", "draw by adjudication")

    def test_draw_counter_resets(self, scripted_engine) -> None:
        white = scripted_engine("W", SHUFFLE_WHITE, scores=[0, 50, 0, 0])
        black = scripted_engine("B", SHUFFLE_BLACK, scores=[0, 0, 0])
        options = GameOptions(
            adjudication=AdjudicationConfig(draw_count=2, draw_score=10)
        )
        game = Game()
        assert game.play((white, black), options) == TerminationCode.DRAW_ADJUDICATION
        assert game.ply == 6

    def test_resignation(self, scripted_engine) -> None:
        white = scripted_engine("W", SHUFFLE_WHITE)
        black = scripted_engine("B", SHUFFLE_BLACK, scores=[-600, -600])
        options = GameOptions(
            adjudication=AdjudicationConfig(resign_count=2, resign_score=500)
        )
        game = Game()
        assert game.play((white, black), options) == TerminationCode.RESIGNATION
        assert game.ply == 3
        assert game.result() == ("1-0", "black resigns")


class TestEngineCommands:
    def test_position_starts_after_last_irreversible_move(
        self, scripted_engine
    ) -> None:
        white = scripted_engine("W", ["e2e4", "g1f3"])
        black = scripted_engine("B", ["e7e5"])
        Game().play((white, black))

        assert white.positions[0] == f"position fen {STARTING_FEN}"
        board = chess.Board()
        board.push_uci("e2e4")
        board.push_uci("e7e5")
        assert black.positions[1] == (
            f"position fen {Rules.board_to_fen(board)} moves g1f3"
        )

    def test_per_seat_limits(self, scripted_engine) -> None:
        white = scripted_engine("W", ["e2e4"])
        black = scripted_engine("B", [None])
        options = GameOptions(limits=(SearchLimits(depth=3), SearchLimits(nodes=500)))
        Game().play((white, black), options)
        assert white.go_commands == ["go depth 3"]
        assert black.go_commands == ["go nodes 500"]

    def test_clock_in_go(self, scripted_engine) -> None:
        white = scripted_engine("W", ["e2e4"], spent_ms=50)
        black = scripted_engine("B", [None])
        options = GameOptions(time_control=TimeControl(1000, 100))
        Game().play((white, black), options)
        assert white.go_commands == ["go wtime 1000 btime 1000 winc 100 binc 100"]
        assert black.go_commands == ["go wtime 1050 btime 1000 winc 100 binc 100"]

    def test_chess960_forwarded(self, scripted_engine) -> None:
        a = scripted_engine("A", [None])
        b = scripted_engine("B", [])
        Game(chess960=True).play((a, b), GameOptions(chess960=True))
        assert a.new_games == [True] and b.new_games == [True]


class TestBlackToMove:
    FEN = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"

    def test_names_follow_side_to_move(self, scripted_engine) -> None:
        first = scripted_engine("first", [None])
        second = scripted_engine("second", [])
        game = Game(self.FEN)
        game.play((first, second))
        assert game.names == {chess.WHITE: "second", chess.BLACK: "first"}
        assert game.result() == ("1-0", "time forfeit")

    def test_clock_sides(self, scripted_engine) -> None:
        first = scripted_engine("first", ["e7e5"], spent_ms=300)
        second = scripted_engine("second", [None])
        options = GameOptions(time_control=TimeControl(1000))
        Game(self.FEN).play((first, second), options)
        assert second.go_commands == ["go wtime 1000 btime 700"]


class TestSamples:
    def test_labelled_by_result(self, scripted_engine) -> None:
        white = scripted_engine("W", SCHOLAR_WHITE, scores=[10, 20, 30, 40])
        black = scripted_engine("B", SCHOLAR_BLACK, scores=[-5, -15, -25])
        game = Game()
        game.play((white, black), GameOptions(record_samples=True))
        samples = game.samples
        assert len(samples) == 7
        assert samples[0].fen == STARTING_FEN
        assert [s.score_cp for s in samples] == [10, -5, 20, -15, 30, -25, 40]
        assert [s.result for s in samples] == [1, -1, 1, -1, 1, -1, 1]

    def test_not_recorded_by_default(self, scripted_engine) -> None:
        white = scripted_engine("W", SCHOLAR_WHITE)
        black = scripted_engine("B", SCHOLAR_BLACK)
        game = Game()
        game.play((white, black))
        assert game.samples == []

    def test_unfinished_game(self) -> None:
        with pytest.raises(RuntimeError):
            Game().samples
