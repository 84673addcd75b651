# quiz.py
from collections import OrderedDict, namedtuple

from brain_data import CATEGORIES

# Top-level flow steps
INTRO = "INTRO"
IDENTIFY = "IDENTIFY"
QUIZ = "QUIZ"
ANALYZING = "ANALYZING"
RESULT = "RESULT"

ADVANCE_DELAY_MS = 300

ScoringResult = namedtuple("ScoringResult", ["primary", "secondary", "scores"])


def _profile_for(profiles, category):
    return dict(profiles[category], category=category)


def score_answers(answers, profiles, question_count=None):
    """
    Tally answered slots per category and rank them.
    Ties keep canonical CATEGORIES order (stable sort over a canonically
    ordered list), never the order the answers came in.
    """
    if question_count is not None and len(answers) != question_count:
        raise ValueError(f"answer set has {len(answers)} slots, expected {question_count}")

    scores = OrderedDict((cat, 0) for cat in CATEGORIES)
    for slot, cat in enumerate(answers):
        if cat is None:
            continue
        if cat not in scores:
            raise ValueError(f"answer {slot} has unknown category {cat!r}")
        scores[cat] += 1

    ranked = sorted(CATEGORIES, key=lambda cat: -scores[cat])
    return ScoringResult(
        primary=_profile_for(profiles, ranked[0]),
        secondary=_profile_for(profiles, ranked[1]),
        scores=scores,
    )


class QuizSession:
    """The one in-flight quiz. Owned by StepController, which alone moves `step`."""

    def __init__(self, questions, scheduler, advance_delay_ms=ADVANCE_DELAY_MS):
        self.questions = questions
        self.scheduler = scheduler
        self.advance_delay_ms = advance_delay_ms
        self._advance_timer = None
        self._init_fields()

    def _init_fields(self):
        self.step = INTRO
        self.index = 0
        self.user_name = ""
        self.commitment = ""
        self.answers = [None] * len(self.questions)
        self.result = None
        self.card_revealed = False

    # ---- read helpers ----
    @property
    def question_count(self):
        return len(self.questions)

    @property
    def current_question(self):
        return self.questions[self.index]

    @property
    def current_answer(self):
        return self.answers[self.index]

    @property
    def is_last_question(self):
        return self.index == len(self.questions) - 1

    @property
    def can_go_next(self):
        return self.current_answer is not None

    @property
    def answered_count(self):
        return sum(1 for a in self.answers if a is not None)

    def progress(self):
        return self.index + 1, len(self.questions)

    # ---- mutations ----
    def set_name(self, text):
        self.user_name = (text or "").strip()

    def set_commitment(self, text):
        self.commitment = text or ""

    def _cancel_advance(self):
        if self._advance_timer is not None:
            self._advance_timer.cancel()
            self._advance_timer = None

    def select_answer(self, category):
        if self.step != QUIZ:
            raise ValueError(f"cannot answer during {self.step}")
        if category not in CATEGORIES:
            raise ValueError(f"unknown category {category!r}")
        self.answers[self.index] = category

        self._cancel_advance()
        if not self.is_last_question:
            at_index = self.index

            def _advance():
                self._advance_timer = None
                # stale if the user already moved or the quiz ended
                if self.step == QUIZ and self.index == at_index:
                    self.index += 1

            self._advance_timer = self.scheduler.call_later(self.advance_delay_ms, _advance)

    def go_next(self):
        """Step forward. Returns True when the last question is answered and the quiz is done."""
        if self.step != QUIZ or self.current_answer is None:
            return False
        if not self.is_last_question:
            self._cancel_advance()
            self.index += 1
            return False
        return True

    def go_back(self):
        if self.step != QUIZ or self.index == 0:
            return
        self._cancel_advance()
        self.index -= 1

    def reset(self):
        self._cancel_advance()
        self._init_fields()
