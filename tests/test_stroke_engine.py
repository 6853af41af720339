"""
Unit tests for the stroke_engine module.

Tests stroke capture, linear undo/redo history and preview rendering.
"""

import unittest

import numpy as np
from PIL import Image

from PX_Libs.PixelateLib.pixelate_filter import PixelateStroke
from PX_Libs.PixelateLib.stroke_engine import StrokeEngine


def paint(engine, points, display_size=(100, 100)):
    engine.begin_stroke(points[0], display_size)
    for point in points[1:]:
        engine.extend_stroke(point)
    return engine.end_stroke()


class TestStrokeCapture(unittest.TestCase):
    """Test beginning, extending and committing strokes."""

    def setUp(self):
        self.engine = StrokeEngine(brush_size=20, block_size=10)

    def test_begin_inside(self):
        """Test a stroke starts on the image and captures its radius."""
        self.assertTrue(self.engine.begin_stroke((0.5, 0.5), (800, 400)))
        self.assertTrue(self.engine.is_painting)
        self.assertAlmostEqual(self.engine.in_progress_stroke().radius, 20 / 800)

    def test_begin_outside_is_ignored(self):
        """Test a stroke cannot start off the image."""
        self.assertFalse(self.engine.begin_stroke((1.2, 0.5), (800, 400)))
        self.assertFalse(self.engine.is_painting)
        self.assertIsNone(self.engine.end_stroke())

    def test_outside_points_are_skipped(self):
        """Test off-image points are dropped without aborting the stroke."""
        stroke = paint(self.engine, [(0.1, 0.1), (-0.2, 0.1), (0.2, 0.2), (0.3, 1.5)])
        self.assertEqual(stroke.points, ((0.1, 0.1), (0.2, 0.2)))

    def test_extend_when_idle(self):
        """Test extending without a stroke in progress does nothing."""
        self.assertFalse(self.engine.extend_stroke((0.5, 0.5)))

    def test_commit_moves_to_applied(self):
        """Test ending a stroke commits it and returns to idle."""
        stroke = paint(self.engine, [(0.1, 0.1), (0.2, 0.2)])
        self.assertEqual(self.engine.applied_strokes, (stroke,))
        self.assertFalse(self.engine.is_painting)
        self.assertIsNone(self.engine.in_progress_stroke())

    def test_block_size_validated(self):
        """Test block size must stay positive."""
        with self.assertRaises(ValueError):
            self.engine.block_size = 0


class TestUndoRedo(unittest.TestCase):
    """Test linear undo/redo semantics."""

    def setUp(self):
        self.engine = StrokeEngine()
        self.first = paint(self.engine, [(0.1, 0.1), (0.15, 0.1)])
        self.second = paint(self.engine, [(0.5, 0.5)])

    def test_undo_then_redo_restores(self):
        """Test undo followed by redo restores the exact applied sequence."""
        before = self.engine.applied_strokes
        self.engine.undo()
        self.assertEqual(self.engine.applied_strokes, (self.first,))
        self.engine.redo()
        self.assertEqual(self.engine.applied_strokes, before)
        self.assertEqual(self.engine.applied_strokes[-1].points, ((0.5, 0.5),))

    def test_new_stroke_clears_redo(self):
        """Test committing a stroke after undo discards redo history."""
        self.engine.undo()
        self.assertTrue(self.engine.can_redo)
        paint(self.engine, [(0.7, 0.7)])
        self.assertFalse(self.engine.can_redo)
        self.assertIsNone(self.engine.redo())

    def test_starting_stroke_keeps_redo_until_commit(self):
        """Test redo history survives until the new stroke is committed."""
        self.engine.undo()
        self.engine.begin_stroke((0.3, 0.3), (100, 100))
        self.assertTrue(self.engine.can_redo)
        self.engine.end_stroke()
        self.assertFalse(self.engine.can_redo)

    def test_empty_stacks_are_noops(self):
        """Test undo and redo on empty stacks do nothing."""
        engine = StrokeEngine()
        self.assertIsNone(engine.undo())
        self.assertIsNone(engine.redo())
        self.assertFalse(engine.can_undo)

    def test_clear(self):
        """Test clear drops all history."""
        self.engine.undo()
        self.engine.clear()
        self.assertEqual(self.engine.applied_strokes, ())
        self.assertEqual(self.engine.redo_strokes, ())


class TestRender(unittest.TestCase):
    """Test preview rendering through the engine."""

    def setUp(self):
        self.base = Image.new("RGBA", (50, 50), (0, 0, 0, 255))
        self.base.paste((255, 255, 255, 255), (0, 0, 20, 50))

    def test_in_progress_is_rendered_but_not_committed(self):
        """Test the preview shows the stroke in progress without committing it."""
        engine = StrokeEngine(brush_size=10, block_size=10)
        engine.begin_stroke((0.5, 0.5), (50, 50))

        preview = np.array(engine.render(self.base))
        without = np.array(engine.render(self.base, include_in_progress=False))

        self.assertFalse((preview == np.array(self.base)).all())
        self.assertTrue((without == np.array(self.base)).all())
        self.assertEqual(engine.applied_strokes, ())

    def test_undo_renders_from_clean_base(self):
        """Test undo re-renders from the untouched base image."""
        engine = StrokeEngine(brush_size=10, block_size=10)
        paint(engine, [(0.5, 0.5)], (50, 50))
        engine.undo()

        self.assertTrue((np.array(engine.render(self.base)) == np.array(self.base)).all())

    def test_strokes_are_immutable(self):
        """Test committed strokes are frozen dataclasses."""
        engine = StrokeEngine()
        stroke = paint(engine, [(0.5, 0.5)])
        self.assertIsInstance(stroke, PixelateStroke)
        with self.assertRaises(Exception):
            stroke.radius = 1.0
