# Declaration card: draw it onto a pygame surface, then snapshot that region
# into a PNG (3x upscale, flattened on white, written atomically).
# - Capture happens on the UI thread; encoding + disk write on a worker.
# - A missing or zero-area card region is a silent no-op.

import os, re, threading, zlib
from collections import namedtuple

import numpy as np
import pygame
from PIL import Image

# ====== CONFIG ======
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
EXPORT_DIR   = os.getenv("BM_EXPORT_DIR", os.path.join(PROJECT_ROOT, "exports"))
EXPORT_SCALE = 3
EXPORT_BG    = (255, 255, 255)
FILE_SUFFIX  = "Limitless_Brain_Declaration"

EXPORT_FAILED_MESSAGE = "could not save the image. check the export folder and try again."

# ---- Card layout ----
CARD_W, CARD_H = 420, 560
CARD_PAD       = 28
CARD_RADIUS    = 28
BAND_H         = 150
INK            = (31, 41, 55)
MUTED          = (156, 163, 175)

FONT_CANDIDATES = [
    os.path.join(PROJECT_ROOT, "assets", "card_font.ttf"),
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
]

ExportResult = namedtuple("ExportResult", ["ok", "path", "reason"])


class CaptureError(Exception):
    pass


class CardRegion:
    """Handle to the on-screen card: a surface plus the rect it was drawn into."""

    def __init__(self, surface=None, rect=None):
        self.surface = surface
        self.rect = pygame.Rect(rect) if rect is not None else None

    @property
    def mounted(self):
        if self.surface is None or self.rect is None:
            return False
        if self.rect.width <= 0 or self.rect.height <= 0:
            return False
        return self.surface.get_rect().contains(self.rect)


# ====== FONTS / TEXT ======
def _font_path():
    for p in FONT_CANDIDATES:
        if os.path.exists(p):
            return p
    return None


def load_card_fonts(base_size=22):
    path = _font_path()
    return {
        "title": pygame.font.Font(path, int(base_size * 1.8)),
        "body":  pygame.font.Font(path, base_size),
        "small": pygame.font.Font(path, max(10, int(base_size * 0.6))),
    }


def _split_long_word(word, font, max_width):
    chunks, current = [], ""
    for ch in word:
        if current and font.size(current + ch)[0] > max_width:
            chunks.append(current)
            current = ch
        else:
            current += ch
    if current:
        chunks.append(current)
    return chunks


def wrap_text(text, font, max_width):
    """Word-wrap to max_width; words wider than a whole line are split by character."""
    words = (text or "").split()
    lines, current = [], ""
    for w in words:
        test = current + (" " if current else "") + w
        if font.size(test)[0] <= max_width:
            current = test
            continue
        if current:
            lines.append(current)
        current = w
        if font.size(w)[0] > max_width:
            *full, current = _split_long_word(w, font, max_width)
            lines.extend(full)
    if current:
        lines.append(current)
    return lines


# ====== DRAWING ======
def _halftone_band(surface, rect, color, seed, cell=12):
    rng = np.random.default_rng(seed)
    cols = max(1, rect.width // cell)
    rows = max(1, rect.height // cell)
    # fade towards the bottom of the band, plus per-cell noise
    fade = np.linspace(0.55, 0.05, rows)[:, None]
    darkness = np.clip(fade + rng.uniform(-0.15, 0.15, size=(rows, cols)), 0.0, 1.0)
    tint = tuple(min(255, int(c + (255 - c) * 0.35)) for c in color)
    for r in range(rows):
        for c in range(cols):
            radius = darkness[r, c] * cell * 0.5
            if radius <= 0.6:
                continue
            cx = rect.x + c * cell + cell // 2
            cy = rect.y + r * cell + cell // 2
            pygame.draw.circle(surface, tint, (cx, cy), int(radius))


def _card_text(user_name, commitment, fonts, width):
    inner_w = width - CARD_PAD * 2
    declare = wrap_text(f"I, {user_name}, declare:", fonts["body"], inner_w)
    lines = wrap_text(f"“{(commitment or '').strip()}”", fonts["body"], inner_w)
    return declare, lines


def card_height(user_name, commitment, fonts, width=CARD_W, min_height=CARD_H):
    """Height the card needs so every commitment line fits above the footer."""
    declare, lines = _card_text(user_name, commitment, fonts, width)
    line_h = fonts["body"].get_linesize()
    needed = (
        BAND_H + CARD_PAD
        + len(declare) * line_h + 14
        + len(lines) * line_h
        + 18 + fonts["small"].get_height() + CARD_PAD
    )
    return max(min_height, needed)


def draw_declaration_card(surface, rect, user_name, profile, commitment, fonts):
    """
    Draw the declaration card at rect on surface and return its CardRegion.
    rect's height is a minimum: the card grows to fit the whole commitment,
    and the returned region's rect carries the final size.
    """
    rect = pygame.Rect(rect)
    rect.height = card_height(user_name, commitment, fonts, rect.width, rect.height)
    declare, lines = _card_text(user_name, commitment, fonts, rect.width)
    card = pygame.Surface(rect.size, pygame.SRCALPHA)
    card_rect = card.get_rect()
    color = tuple(profile["color"])

    pygame.draw.rect(card, (255, 255, 255), card_rect, border_radius=CARD_RADIUS)
    band = pygame.Rect(0, 0, card_rect.width, min(BAND_H, card_rect.height))
    pygame.draw.rect(card, color, band, border_top_left_radius=CARD_RADIUS, border_top_right_radius=CARD_RADIUS)
    _halftone_band(card, band, color, zlib.crc32((user_name or "").encode("utf-8")))

    y = CARD_PAD
    for text, font, col in (
        ("BRAIN DECLARATION", fonts["small"], (255, 255, 255)),
        (profile["name"], fonts["title"], (255, 255, 255)),
        (profile.get("english_name", ""), fonts["small"], (255, 255, 255)),
    ):
        if not text:
            continue
        img = font.render(text, True, col)
        card.blit(img, (CARD_PAD, y))
        y += img.get_height() + 6

    line_h = fonts["body"].get_linesize()
    y = band.bottom + CARD_PAD
    for line in declare:
        card.blit(fonts["body"].render(line, True, INK), (CARD_PAD, y))
        y += line_h
    y += 14

    for line in lines:
        card.blit(fonts["body"].render(line, True, color), (CARD_PAD, y))
        y += line_h

    footer = fonts["small"].render("LIMITLESS BRAIN · C.O.D.E", True, MUTED)
    footer_y = card_rect.height - CARD_PAD - footer.get_height()

    pygame.draw.line(card, (229, 231, 235), (CARD_PAD, footer_y - 10), (card_rect.width - CARD_PAD, footer_y - 10), 2)
    card.blit(footer, (CARD_PAD, footer_y))

    surface.blit(card, rect.topleft)
    return CardRegion(surface, rect)


# ====== CAPTURE / ENCODE ======
def capture_region(region):
    """Snapshot the region as an RGBA PIL image."""
    try:
        sub = region.surface.subsurface(region.rect)
        rgb = pygame.surfarray.array3d(sub).swapaxes(0, 1)
        alpha = pygame.surfarray.array_alpha(sub).swapaxes(0, 1)
        rgba = np.dstack((rgb, alpha)).astype(np.uint8)
        return Image.fromarray(rgba)
    except (pygame.error, ValueError) as e:
        raise CaptureError(f"capture failed: {e}") from e


def render_export_image(image, scale=EXPORT_SCALE):
    """Upscale and flatten over opaque white; the result has no alpha channel."""
    image = image.convert("RGBA")
    w, h = image.size
    big = image.resize((w * scale, h * scale), Image.LANCZOS)
    flat = Image.new("RGB", big.size, EXPORT_BG)
    flat.paste(big, (0, 0), big)
    return flat


def export_filename(user_name):
    name = re.sub(r'[\\/:*?"<>|\x00-\x1f]', "_", (user_name or "").strip()) or "Friend"
    return f"{name}_{FILE_SUFFIX}.png"


def save_export(image, user_name, out_dir=EXPORT_DIR):
    path = os.path.join(out_dir, export_filename(user_name))
    tmp_path = path + ".part"
    try:
        os.makedirs(out_dir, exist_ok=True)
        render_export_image(image).save(tmp_path, format="PNG")
        os.replace(tmp_path, path)
    except (OSError, ValueError) as e:
        print(f"[ERROR] Card export failed: {e}")
        try:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        except OSError:
            pass
        return ExportResult(False, None, str(e))
    print(f"[export] Saved: {path}")
    return ExportResult(True, path, None)


def export_card(region, user_name, out_dir=EXPORT_DIR):
    """
    Capture + save in one call.
    Returns None (no-op) when the card is not mounted or has no area,
    otherwise an ExportResult.
    """
    if region is None or not region.mounted:
        print("[export] Card not on screen; nothing to save.")
        return None
    try:
        image = capture_region(region)
    except CaptureError as e:
        print(f"[ERROR] {e}")
        return ExportResult(False, None, str(e))
    return save_export(image, user_name, out_dir)


class CardExporter:
    """
    Runs exports in the background so the UI keeps drawing.
    One export at a time; requests made while one is pending are ignored.
    """

    def __init__(self, out_dir=EXPORT_DIR):
        self.out_dir = out_dir
        self._lock = threading.Lock()
        self._thread = None
        self._result = None

    @property
    def busy(self):
        return self._thread is not None and self._thread.is_alive()

    def request(self, region, user_name):
        """Start an export. Returns True if one was started (or failed at capture)."""
        if self.busy:
            print("[export] Already saving; request ignored.")
            return False
        if region is None or not region.mounted:
            print("[export] Card not on screen; nothing to save.")
            return False
        try:
            image = capture_region(region)
        except CaptureError as e:
            print(f"[ERROR] {e}")
            with self._lock:
                self._result = ExportResult(False, None, str(e))
            return True

        def _export_worker():
            res = save_export(image, user_name, self.out_dir)
            with self._lock:
                self._result = res

        self._thread = threading.Thread(target=_export_worker, daemon=True)
        self._thread.start()
        return True

    def poll(self):
        """Hand back a finished ExportResult once, else None."""
        with self._lock:
            res, self._result = self._result, None
        return res

    def wait(self, timeout=None):
        t = self._thread
        if t is not None:
            t.join(timeout)
