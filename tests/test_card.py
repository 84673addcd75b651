"""Tests for the declaration card export pipeline."""

import os
import threading

import pygame
import pytest
from PIL import Image

import card
from brain_data import OWL, PROFILES
from card import (
    EXPORT_SCALE, CardExporter, CardRegion, ExportResult,
    card_height, draw_declaration_card, export_card, export_filename, load_card_fonts, wrap_text,
)


def _solid_region(color=(200, 30, 30), size=(40, 20)):
    surface = pygame.Surface((100, 80))
    surface.fill((0, 0, 0))
    rect = pygame.Rect(10, 10, *size)
    surface.fill(color, rect)
    return CardRegion(surface, rect)


def _files(path):
    return sorted(p for p in os.listdir(path)) if os.path.isdir(path) else []


class TestRegion:
    def test_unmounted_without_surface(self):
        assert not CardRegion().mounted
        assert not CardRegion(None, (0, 0, 10, 10)).mounted

    def test_zero_area_is_not_mounted(self):
        surface = pygame.Surface((50, 50))
        assert not CardRegion(surface, (0, 0, 0, 10)).mounted
        assert not CardRegion(surface, (0, 0, 10, 0)).mounted

    def test_rect_outside_surface_is_not_mounted(self):
        surface = pygame.Surface((50, 50))
        assert not CardRegion(surface, (40, 40, 20, 20)).mounted

    def test_mounted(self):
        assert _solid_region().mounted


class TestExportCard:
    def test_writes_one_upscaled_opaque_png(self, tmp_path):
        res = export_card(_solid_region(), "Ada", str(tmp_path))
        assert res.ok and res.reason is None
        assert os.path.basename(res.path) == "Ada_Limitless_Brain_Declaration.png"
        assert _files(tmp_path) == ["Ada_Limitless_Brain_Declaration.png"]
        with Image.open(res.path) as img:
            assert img.format == "PNG"
            assert img.mode == "RGB"
            assert img.size == (40 * EXPORT_SCALE, 20 * EXPORT_SCALE)
            assert img.getpixel((60, 30)) == (200, 30, 30)

    def test_transparent_pixels_become_white(self, tmp_path):
        surface = pygame.Surface((30, 30), pygame.SRCALPHA)
        surface.fill((0, 0, 0, 0))
        surface.fill((0, 0, 255, 255), pygame.Rect(0, 0, 30, 10))
        res = export_card(CardRegion(surface, (0, 0, 30, 30)), "Ada", str(tmp_path))
        with Image.open(res.path) as img:
            assert img.getpixel((45, 80)) == (255, 255, 255)
            assert img.getpixel((45, 5)) == (0, 0, 255)

    def test_not_yet_mounted_is_a_noop(self, tmp_path):
        assert export_card(CardRegion(), "Ada", str(tmp_path)) is None
        assert export_card(None, "Ada", str(tmp_path)) is None
        assert _files(tmp_path) == []

    def test_zero_area_is_a_noop(self, tmp_path):
        region = CardRegion(pygame.Surface((20, 20)), (0, 0, 0, 0))
        assert export_card(region, "Ada", str(tmp_path)) is None
        assert _files(tmp_path) == []

    def test_capture_failure_reports_and_writes_nothing(self, tmp_path, monkeypatch):
        def broken(_surface):
            raise pygame.error("pixel capture blocked")

        monkeypatch.setattr(card.pygame.surfarray, "array3d", broken)
        res = export_card(_solid_region(), "Ada", str(tmp_path))
        assert res == ExportResult(False, None, res.reason)
        assert "pixel capture blocked" in res.reason
        assert _files(tmp_path) == []

    def test_write_failure_leaves_no_partial_file(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        res = export_card(_solid_region(), "Ada", str(blocker))
        assert not res.ok
        assert _files(tmp_path) == ["not_a_dir"]

    def test_export_does_not_change_the_source_surface(self, tmp_path):
        region = _solid_region()
        before = pygame.image.tobytes(region.surface, "RGB")
        export_card(region, "Ada", str(tmp_path))
        assert pygame.image.tobytes(region.surface, "RGB") == before


class TestFilename:
    def test_name_plus_suffix(self):
        assert export_filename("Grace") == "Grace_Limitless_Brain_Declaration.png"

    def test_path_characters_are_replaced(self):
        assert export_filename("../a/b") == ".._a_b_Limitless_Brain_Declaration.png"

    def test_blank_name_falls_back(self):
        assert export_filename("  ") == "Friend_Limitless_Brain_Declaration.png"


class TestCardExporter:
    def test_background_export_then_poll_once(self, tmp_path):
        exporter = CardExporter(str(tmp_path))
        assert exporter.request(_solid_region(), "Ada") is True
        exporter.wait(timeout=10)
        res = exporter.poll()
        assert res.ok
        assert exporter.poll() is None

    def test_second_request_while_busy_is_ignored(self, tmp_path, monkeypatch):
        gate = threading.Event()
        calls = []
        real_save = card.save_export

        def slow_save(image, user_name, out_dir):
            calls.append(user_name)
            gate.wait(10)
            return real_save(image, user_name, out_dir)

        monkeypatch.setattr(card, "save_export", slow_save)
        exporter = CardExporter(str(tmp_path))
        assert exporter.request(_solid_region(), "Ada") is True
        assert exporter.busy
        assert exporter.request(_solid_region(), "Bea") is False
        gate.set()
        exporter.wait(timeout=10)
        assert calls == ["Ada"]
        assert exporter.poll().ok
        assert _files(tmp_path) == ["Ada_Limitless_Brain_Declaration.png"]

    def test_unmounted_request_is_a_noop(self, tmp_path):
        exporter = CardExporter(str(tmp_path))
        assert exporter.request(CardRegion(), "Ada") is False
        assert exporter.poll() is None

    def test_capture_failure_is_reported_via_poll(self, tmp_path, monkeypatch):
        def broken(_surface):
            raise pygame.error("nope")

        monkeypatch.setattr(card.pygame.surfarray, "array3d", broken)
        exporter = CardExporter(str(tmp_path))
        assert exporter.request(_solid_region(), "Ada") is True
        res = exporter.poll()
        assert res is not None and not res.ok


def test_drawn_card_exports(tmp_path, pygame_fonts):
    surface = pygame.Surface((card.CARD_W + 40, card.CARD_H + 40))
    surface.fill((240, 240, 240))
    fonts = load_card_fonts(18)
    region = draw_declaration_card(
        surface, (20, 20, card.CARD_W, card.CARD_H), "Ada", PROFILES[OWL], "read ten pages every morning", fonts
    )
    assert region.mounted
    assert region.rect.size == (card.CARD_W, card.CARD_H)
    res = export_card(region, "Ada", str(tmp_path))
    with Image.open(res.path) as img:
        assert img.size == (card.CARD_W * EXPORT_SCALE, card.CARD_H * EXPORT_SCALE)
        # card body is plain white along its left edge
        assert img.getpixel((5, card.CARD_H * EXPORT_SCALE // 2)) == (255, 255, 255)


LONG_COMMITMENT = "I will read ten pages every single morning before breakfast " * 12


def test_short_commitment_keeps_the_base_height(pygame_fonts):
    fonts = load_card_fonts(18)
    assert card_height("Ada", "read ten pages", fonts) == card.CARD_H


def test_long_commitment_grows_the_card(tmp_path, pygame_fonts):
    fonts = load_card_fonts(18)
    expected_h = card_height("Ada", LONG_COMMITMENT, fonts)
    assert expected_h > card.CARD_H

    surface = pygame.Surface((card.CARD_W + 40, expected_h + 40))
    region = draw_declaration_card(
        surface, (20, 20, card.CARD_W, card.CARD_H), "Ada", PROFILES[OWL], LONG_COMMITMENT, fonts
    )
    assert region.mounted
    assert region.rect.size == (card.CARD_W, expected_h)

    # every wrapped line sits above the footer rule
    inner_w = card.CARD_W - card.CARD_PAD * 2
    line_h = fonts["body"].get_linesize()
    declare = wrap_text("I, Ada, declare:", fonts["body"], inner_w)
    lines = wrap_text(f"“{LONG_COMMITMENT.strip()}”", fonts["body"], inner_w)
    text_bottom = card.BAND_H + card.CARD_PAD + (len(declare) + len(lines)) * line_h + 14
    footer_rule = expected_h - card.CARD_PAD - fonts["small"].get_height() - 10
    assert text_bottom <= footer_rule

    res = export_card(region, "Ada", str(tmp_path))
    assert res.ok
    with Image.open(res.path) as img:
        assert img.size == (card.CARD_W * EXPORT_SCALE, expected_h * EXPORT_SCALE)


def test_card_that_grows_past_its_surface_is_not_mounted(pygame_fonts):
    fonts = load_card_fonts(18)
    surface = pygame.Surface((card.CARD_W + 40, card.CARD_H + 40))
    region = draw_declaration_card(
        surface, (20, 20, card.CARD_W, card.CARD_H), "Ada", PROFILES[OWL], LONG_COMMITMENT, fonts
    )
    assert not region.mounted


class TestWrapText:
    def test_wraps_on_words(self, pygame_fonts):
        font = load_card_fonts(18)["body"]
        lines = wrap_text("read ten pages every morning", font, font.size("read ten pages")[0])
        assert lines[0] == "read ten pages"
        assert " ".join(lines) == "read ten pages every morning"

    def test_word_wider_than_a_line_is_split(self, pygame_fonts):
        font = load_card_fonts(18)["body"]
        word = "Pneumonoultramicroscopicsilicovolcanoconiosis" * 3
        max_width = font.size("Pneumono")[0]
        lines = wrap_text(f"I {word} daily", font, max_width)
        assert len(lines) > 3
        assert all(font.size(ln)[0] <= max_width for ln in lines)
        assert "".join(lines).replace(" ", "") == f"I{word}daily"

    def test_empty_text(self, pygame_fonts):
        font = load_card_fonts(18)["body"]
        assert wrap_text("", font, 100) == []
        assert wrap_text(None, font, 100) == []
