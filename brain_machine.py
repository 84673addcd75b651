#!/usr/bin/env python3
# Limitless Brain: C.O.D.E brain-type quiz -> result -> declaration card -> PNG.
# One window, keyboard driven. Every frame: events -> timers -> export poll -> draw.

import os, sys, math, argparse

import pygame

from brain_data import QUESTIONS, PROFILES, CATEGORIES, option_label, validate_content
from card import (
    CARD_W, CARD_H, EXPORT_DIR, EXPORT_FAILED_MESSAGE,
    CardExporter, CardRegion, draw_declaration_card, load_card_fonts, wrap_text,
)
from flow import StepController, ValidationError
from quiz import INTRO, IDENTIFY, QUIZ, ANALYZING, RESULT
from timers import Scheduler


# ====== CONFIG ======
def _get_env_flag(name, default=False):
    v = (os.getenv(name) or "").strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return bool(default)


def _canvas_size(default=(540, 960)):
    # Override with BM_CANVAS="720x1280"
    raw = (os.getenv("BM_CANVAS") or "").lower()
    if "x" in raw:
        try:
            w, h = raw.split("x")
            return int(w), int(h)
        except ValueError:
            print(f"[WARN] Bad BM_CANVAS {raw!r}; using {default[0]}x{default[1]}")
    return default


WIDTH, HEIGHT = _canvas_size()
FONT_SIZE = int(os.getenv("BM_FONT", "24"))
MARGIN = 36
PAGE_H = 4000  # starting height of the scrollable result page; grows to fit

# ====== Colours & timing ======
BG      = (255, 255, 255)
INK     = (31, 41, 55)
MUTED   = (107, 114, 128)
FAINT   = (229, 231, 235)
INDIGO  = (79, 70, 229)
ERROR   = (220, 38, 38)

BLINK_INTERVAL_MS = 450
TOAST_MS = 2800
MAX_NAME_CHARS = 20
SCROLL_STEP = 60

# dev exits: windowed ESC quits; fullscreen needs ESC x3 within this window
_ESC_TAP_WINDOW_MS = 800


class BrainMachine:
    def __init__(self, display, export_dir=EXPORT_DIR, windowed=False, fast=False):
        self.display = display
        self.windowed = windowed
        self.screen = pygame.Surface((WIDTH, HEIGHT)).convert()
        self.page = pygame.Surface((WIDTH, PAGE_H)).convert()
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, FONT_SIZE + 6)
        self.small = pygame.font.Font(None, FONT_SIZE)
        self.big = pygame.font.Font(None, FONT_SIZE * 2 + 8)
        self.card_fonts = load_card_fonts(FONT_SIZE - 2)

        self.scheduler = Scheduler()
        self.flow = StepController(
            QUESTIONS,
            PROFILES,
            self.scheduler,
            analyzing_delay_ms=400 if fast else 2500,
            on_result=self._scroll_to_top,
            on_card_revealed=self._focus_card,
        )
        self.exporter = CardExporter(export_dir)
        self._clear_view()
        self._esc_taps = []
        self._compute_dest()

    def _clear_view(self):
        self.name_buf = ""
        self.commit_buf = ""
        self.message = ""
        self.toast = ""
        self.toast_until = 0
        self.cursor = 0
        self._cursor_q = -1
        self.scroll = 0
        self.page_h = HEIGHT
        self.card_top = 0
        self.card_h = CARD_H
        self.card_region = CardRegion()

    # ====== display ======
    def _compute_dest(self):
        sw, sh = self.display.get_size()
        ratio = WIDTH / HEIGHT
        if sw / sh > ratio:
            self.dest_h = sh
            self.dest_w = int(sh * ratio)
        else:
            self.dest_w = sw
            self.dest_h = int(sw / ratio)
        self.dest_x = (sw - self.dest_w) // 2
        self.dest_y = (sh - self.dest_h) // 2

    def present(self):
        """Scale the logical canvas once, letterbox, then flip."""
        if (self.dest_w, self.dest_h) == (WIDTH, HEIGHT):
            scaled = self.screen
        else:
            scaled = pygame.transform.smoothscale(self.screen, (self.dest_w, self.dest_h))
        self.display.fill((0, 0, 0))
        self.display.blit(scaled, (self.dest_x, self.dest_y))
        pygame.display.flip()

    # ====== flow hooks ======
    def _scroll_to_top(self):
        self.scroll = 0

    def _focus_card(self):
        target = self.card_top + self.card_h // 2 - HEIGHT // 2
        self.scroll = max(0, min(target, self.page_h - HEIGHT))

    def _notify(self, text):
        self.toast = text
        self.toast_until = pygame.time.get_ticks() + TOAST_MS

    # ====== input ======
    def _wants_exit(self, ev):
        if ev.type == pygame.QUIT:
            return True
        if ev.type == pygame.KEYDOWN and ev.key == pygame.K_ESCAPE:
            if self.windowed:
                print("[EXIT] ESC (dev window).")
                return True
            now = pygame.time.get_ticks()
            self._esc_taps = [t for t in self._esc_taps if now - t <= _ESC_TAP_WINDOW_MS]
            self._esc_taps.append(now)
            if len(self._esc_taps) >= 3:
                print("[EXIT] ESC x3. Exiting.")
                return True
        return False

    def handle_event(self, ev):
        step = self.flow.step
        if ev.type == pygame.MOUSEWHEEL and step == RESULT:
            self._scroll_by(-ev.y * SCROLL_STEP)
            return
        if ev.type != pygame.KEYDOWN:
            return
        if step == INTRO:
            if ev.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                self.flow.start()
        elif step == IDENTIFY:
            self._handle_name_key(ev)
        elif step == QUIZ:
            self._handle_quiz_key(ev)
        elif step == RESULT:
            self._handle_result_key(ev)

    def _handle_name_key(self, ev):
        if ev.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            try:
                self.flow.submit_name(self.name_buf)
            except ValidationError as e:
                self.message = str(e)
                return
            self.message = ""
            self.cursor = 0
        elif ev.key == pygame.K_BACKSPACE:
            self.name_buf = self.name_buf[:-1]
        elif ev.unicode and ev.unicode.isprintable() and len(self.name_buf) < MAX_NAME_CHARS:
            self.name_buf += ev.unicode

    def _handle_quiz_key(self, ev):
        options = self.flow.session.current_question["options"]
        letter = ev.unicode.upper() if ev.unicode else ""
        if letter and "A" <= letter < option_label(len(options)):
            self._choose(ord(letter) - ord("A"))
        elif ev.key in (pygame.K_UP, pygame.K_w):
            self.cursor = (self.cursor - 1) % len(options)
        elif ev.key in (pygame.K_DOWN, pygame.K_s):
            self.cursor = (self.cursor + 1) % len(options)
        elif ev.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._choose(self.cursor)
        elif ev.key == pygame.K_RIGHT:
            self.flow.go_next()
        elif ev.key == pygame.K_LEFT:
            self.flow.go_back()

    def _choose(self, idx):
        self.cursor = idx
        _label, category = self.flow.session.current_question["options"][idx]
        self.flow.select_answer(category)

    def _handle_result_key(self, ev):
        ctrl = ev.mod & pygame.KMOD_CTRL
        if ctrl and ev.key == pygame.K_s:
            if not self.flow.session.card_revealed:
                return
            if self.exporter.request(self.card_region, self.flow.session.user_name):
                self._notify("saving your declaration...")
        elif ctrl and ev.key == pygame.K_r:
            self.reset()
        elif ev.key in (pygame.K_PAGEDOWN, pygame.K_DOWN):
            self._scroll_by(SCROLL_STEP if ev.key == pygame.K_DOWN else HEIGHT - 80)
        elif ev.key in (pygame.K_PAGEUP, pygame.K_UP):
            self._scroll_by(-SCROLL_STEP if ev.key == pygame.K_UP else -(HEIGHT - 80))
        elif ev.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            try:
                self.flow.reveal_card()
            except ValidationError as e:
                self.message = str(e)
                return
            self.message = ""
        elif ev.key == pygame.K_BACKSPACE:
            self.commit_buf = self.commit_buf[:-1]
            self.flow.set_commitment(self.commit_buf)
        elif ev.unicode and ev.unicode.isprintable() and not ctrl:
            self.commit_buf += ev.unicode
            self.flow.set_commitment(self.commit_buf)

    def _scroll_by(self, dy):
        self.scroll = max(0, min(self.scroll + dy, max(0, self.page_h - HEIGHT)))

    def reset(self):
        self.flow.reset()
        self._clear_view()
        print("[quiz] Reset.")

    # ====== drawing helpers ======
    def _blit_lines(self, surface, lines, font, color, x, y, gap=6):
        for ln in lines:
            img = font.render(ln, True, color)
            surface.blit(img, (x, y))
            y += img.get_height() + gap
        return y

    def _blit_wrapped(self, surface, text, font, color, x, y, width=None, gap=6):
        width = width or (WIDTH - MARGIN * 2)
        return self._blit_lines(surface, wrap_text(text, font, width), font, color, x, y, gap)

    def _caret(self, surface, x, y, font, color=INDIGO):
        if (pygame.time.get_ticks() // BLINK_INTERVAL_MS) % 2 == 0:
            pygame.draw.rect(surface, color, (x, y, 3, font.get_height()))

    def _hint(self, text):
        img = self.small.render(text, True, MUTED)
        self.screen.blit(img, ((WIDTH - img.get_width()) // 2, HEIGHT - 48))

    # ====== screens ======
    def draw_intro(self):
        s = self.screen
        t = pygame.time.get_ticks() / 1000.0
        cy = HEIGHT // 3 + int(math.sin(t * 1.6) * 10)
        pygame.draw.rect(s, INDIGO, (WIDTH // 2 - 48, cy - 48, 96, 96), border_radius=34)
        letters = self.font.render("C·O·D·E", True, BG)
        s.blit(letters, (WIDTH // 2 - letters.get_width() // 2, cy - letters.get_height() // 2))
        y = HEIGHT // 2
        y = self._blit_centered("Limitless Brain", self.big, INK, y)
        y = self._blit_centered("brain type test", self.big, INDIGO, y)
        y += 20
        y = self._blit_centered("find the engine your brain runs on", self.small, MUTED, y)
        self._hint("press ENTER to start")

    def _blit_centered(self, text, font, color, y):
        img = font.render(text, True, color)
        self.screen.blit(img, ((WIDTH - img.get_width()) // 2, y))
        return y + img.get_height() + 8

    def draw_identify(self):
        s = self.screen
        y = HEIGHT // 3
        y = self._blit_lines(s, ["hello!"], self.big, INK, MARGIN, y)
        y = self._blit_wrapped(s, "what name should go on your result?", self.font, MUTED, MARGIN, y + 8)
        box = pygame.Rect(MARGIN, y + 30, WIDTH - MARGIN * 2, self.big.get_height() + 24)
        pygame.draw.rect(s, (249, 250, 251), box, border_radius=18)
        pygame.draw.rect(s, INDIGO if self.name_buf.strip() else FAINT, box, 2, border_radius=18)
        img = self.big.render(self.name_buf, True, INK)
        s.blit(img, (box.x + 18, box.y + 12))
        self._caret(s, box.x + 22 + img.get_width(), box.y + 12, self.big)
        if self.message:
            self._blit_wrapped(s, self.message, self.small, ERROR, MARGIN, box.bottom + 16)
        self._hint("type your name, press ENTER to continue")

    def draw_quiz(self):
        s = self.screen
        sess = self.flow.session
        n, total = sess.progress()
        y = 40
        s.blit(self.small.render(f"QUESTION {n}", True, INDIGO), (MARGIN, y))
        count = self.small.render(f"{n} / {total}", True, MUTED)
        s.blit(count, (WIDTH - MARGIN - count.get_width(), y))
        y += count.get_height() + 10
        bar = pygame.Rect(MARGIN, y, WIDTH - MARGIN * 2, 8)
        pygame.draw.rect(s, FAINT, bar, border_radius=4)
        pygame.draw.rect(s, INDIGO, (bar.x, bar.y, int(bar.width * n / total), bar.height), border_radius=4)

        y = self._blit_wrapped(s, sess.current_question["prompt"], self.big, INK, MARGIN, y + 48)
        y += 30
        for i, (label, category) in enumerate(sess.current_question["options"]):
            chosen = sess.current_answer == category
            lines = wrap_text(label, self.font, WIDTH - MARGIN * 2 - 80)
            h = max(64, len(lines) * (self.font.get_height() + 4) + 28)
            box = pygame.Rect(MARGIN, y, WIDTH - MARGIN * 2, h)
            pygame.draw.rect(s, INDIGO if chosen else BG, box, border_radius=22)
            pygame.draw.rect(s, INDIGO if (chosen or i == self.cursor) else FAINT, box, 2, border_radius=22)
            fg = BG if chosen else INK
            s.blit(self.font.render(option_label(i), True, BG if chosen else INDIGO), (box.x + 20, box.y + 14))
            self._blit_lines(s, lines, self.font, fg, box.x + 60, box.y + 14, gap=4)
            y = box.bottom + 14

        nxt = "result" if sess.is_last_question else "next"
        self._hint(f"A-D to choose · LEFT back · RIGHT {nxt}" if sess.can_go_next else "A-D to choose · LEFT back")

    def draw_analyzing(self):
        s = self.screen
        cx, cy = WIDTH // 2, HEIGHT // 3
        rect = pygame.Rect(cx - 64, cy - 64, 128, 128)
        pygame.draw.circle(s, (238, 242, 255), (cx, cy), 64, 12)
        start = (pygame.time.get_ticks() / 1000.0) * 2 * math.pi / 3
        pygame.draw.arc(s, INDIGO, rect, -start, -start + math.pi / 2, 12)
        y = cy + 110
        y = self._blit_centered("analysing your brain system...", self.font, INK, y)
        y += 12
        for ln in wrap_text("“your brain is not fixed hardware. it is software you can upgrade every day.”",
                            self.small, WIDTH - MARGIN * 2):
            y = self._blit_centered(ln, self.small, MUTED, y)

    def draw_result(self):
        p = self.page
        p.fill(BG)
        sess = self.flow.session
        res = sess.result
        primary = res.primary
        total = sess.question_count
        inner = WIDTH - MARGIN * 2

        # header band in the primary colour
        header_h = 300
        pygame.draw.rect(p, primary["color"], (0, 0, WIDTH, header_h))
        y = 60
        y = self._blit_lines(p, ["PRIMARY BRAIN PROFILE"], self.small, BG, MARGIN, y)
        y = self._blit_lines(p, [primary["name"]], self.big, BG, MARGIN, y + 6)
        self._blit_wrapped(p, primary["description"], self.font, BG, MARGIN, y + 10)

        y = header_h + 30
        y = self._blit_lines(p, ["C.O.D.E balance"], self.font, INK, MARGIN, y)
        tot = self.small.render(f"total {total} points", True, MUTED)
        p.blit(tot, (WIDTH - MARGIN - tot.get_width(), y - tot.get_height() - 6))
        for cat in CATEGORIES:
            prof = PROFILES[cat]
            score = res.scores[cat]
            p.blit(self.small.render(prof["english_name"].upper(), True, MUTED), (MARGIN, y + 8))
            val = self.small.render(f"{score} / {total}", True, prof["color"])
            p.blit(val, (WIDTH - MARGIN - val.get_width(), y + 8))
            y += val.get_height() + 14
            pygame.draw.rect(p, (249, 250, 251), (MARGIN, y, inner, 12), border_radius=6)
            if score:
                pygame.draw.rect(p, prof["color"], (MARGIN, y, int(inner * score / total), 12), border_radius=6)
            y += 22

        y += 20
        y = self._blit_lines(p, [f"secondary type: {res.secondary['name']}"], self.font, INK, MARGIN, y)
        y = self._blit_wrapped(p, f"best partner: [{primary['partner']}]. you create synergy together.",
                               self.font, INK, MARGIN, y + 12)
        y = self._blit_lines(p, ["your blind spot"], self.font, INK, MARGIN, y + 18)
        y = self._blit_wrapped(p, primary["blind_spot"], self.small, MUTED, MARGIN, y)

        for title, tips in (
            ("reading that makes you smarter", primary["reading_strategy"]),
            ("memory training", primary["memory_strategy"]),
        ):
            y = self._blit_lines(p, [title], self.font, INK, MARGIN, y + 24)
            for tip in tips:
                y = self._blit_wrapped(p, f"•  {tip}", self.small, MUTED, MARGIN + 8, y + 4, width=inner - 8)

        # commitment box
        y += 30
        box_top = y
        y = box_top + 20 + self.font.get_height() + 6
        text_lines = wrap_text(self.commit_buf, self.small, inner - 40) or [""]
        box_h = 20 + 40 + len(text_lines) * (self.small.get_height() + 6) + 70
        pygame.draw.rect(p, INDIGO, (MARGIN, box_top, inner, box_h), border_radius=30)
        self._blit_lines(p, ["your commitment"], self.font, BG, MARGIN + 20, box_top + 20)
        ty = self._blit_lines(p, text_lines, self.small, BG, MARGIN + 20, y + 10)
        last = self.small.render(text_lines[-1], True, BG)
        self._caret(p, MARGIN + 22 + last.get_width(), ty - self.small.get_height() - 6, self.small, BG)
        self._blit_lines(p, ["press ENTER to issue your declaration card"], self.small, BG, MARGIN + 20, box_top + box_h - 36)
        y = box_top + box_h + 12
        if self.message:
            y = self._blit_wrapped(p, self.message, self.small, ERROR, MARGIN, y)

        if sess.card_revealed:
            y += 24
            self.card_top = y
            rect = pygame.Rect((WIDTH - CARD_W) // 2, y, CARD_W, CARD_H)
            self.card_region = draw_declaration_card(p, rect, sess.user_name, primary, sess.commitment, self.card_fonts)
            self.card_h = self.card_region.rect.height
            y = self.card_region.rect.bottom + 16
            y = self._blit_lines(p, ["ctrl+S saves your declaration as an image"], self.small, MUTED, MARGIN, y)
        else:
            self.card_region = CardRegion()

        y = self._blit_lines(p, ["ctrl+R to take the test again"], self.small, MUTED, MARGIN, y + 30)
        self.page_h = y + 40
        if self.page_h > p.get_height():
            # content ran past the surface: grow it and draw again so nothing is clipped
            self.page = pygame.Surface((WIDTH, self.page_h)).convert()
            return self.draw_result()
        self.scroll = max(0, min(self.scroll, max(0, self.page_h - HEIGHT)))
        self.screen.blit(p, (0, -self.scroll))

    def draw_toast(self):
        if not self.toast or pygame.time.get_ticks() > self.toast_until:
            self.toast = ""
            return
        img = self.small.render(self.toast, True, BG)
        box = img.get_rect()
        box.inflate_ip(36, 22)
        box.midbottom = (WIDTH // 2, HEIGHT - 90)
        pygame.draw.rect(self.screen, INK, box, border_radius=16)
        self.screen.blit(img, (box.x + 18, box.y + 11))

    # ====== main loop ======
    def frame(self):
        self.scheduler.update()
        res = self.exporter.poll()
        if res is not None:
            self._notify(f"saved: {os.path.basename(res.path)}" if res.ok else EXPORT_FAILED_MESSAGE)

        step = self.flow.step
        if step == QUIZ and self.flow.session.index != self._cursor_q:
            # new question: park the highlight on its saved answer, if any
            sess = self.flow.session
            self._cursor_q = sess.index
            cats = [c for _l, c in sess.current_question["options"]]
            self.cursor = cats.index(sess.current_answer) if sess.current_answer in cats else 0

        self.screen.fill(BG)
        {
            INTRO: self.draw_intro,
            IDENTIFY: self.draw_identify,
            QUIZ: self.draw_quiz,
            ANALYZING: self.draw_analyzing,
            RESULT: self.draw_result,
        }[step]()
        self.draw_toast()
        self.present()

    def run(self):
        pygame.key.set_repeat(400, 35)
        while True:
            for ev in pygame.event.get():
                if self._wants_exit(ev):
                    return
                self.handle_event(ev)
            self.frame()
            self.clock.tick(60)


# ====== CLI ======
def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Limitless Brain type test")
    p.add_argument("--windowed", action="store_true", help="Run in a window instead of fullscreen")
    p.add_argument("--export-dir", default=EXPORT_DIR, help="Where declaration PNGs are saved")
    p.add_argument("--fast", action="store_true", help="Shorten the analysing pause (demos)")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    windowed = args.windowed or _get_env_flag("BM_WINDOWED", False)
    validate_content(QUESTIONS, PROFILES)
    print(f"[quiz] Loaded {len(QUESTIONS)} questions, {len(PROFILES)} brain types.")

    pygame.init()
    if windowed:
        display = pygame.display.set_mode((WIDTH, HEIGHT))
    else:
        info = pygame.display.Info()
        display = pygame.display.set_mode((info.current_w, info.current_h), pygame.FULLSCREEN)
    pygame.display.set_caption("Limitless Brain")

    app = BrainMachine(display, export_dir=args.export_dir, windowed=windowed, fast=args.fast)
    try:
        app.run()
    finally:
        app.exporter.wait(timeout=5)
        pygame.quit()


if __name__ == "__main__":
    sys.exit(main())
