# flow.py — top-level step machine: INTRO -> IDENTIFY -> QUIZ -> ANALYZING -> RESULT
from quiz import (
    INTRO, IDENTIFY, QUIZ, ANALYZING, RESULT,
    ADVANCE_DELAY_MS, QuizSession, score_answers,
)

ANALYZING_DELAY_MS = 2500
CARD_FOCUS_DELAY_MS = 100
MIN_COMMITMENT_CHARS = 5

NAME_REQUIRED_MESSAGE = "please enter your name to continue."
COMMITMENT_TOO_SHORT_MESSAGE = (
    f"write a commitment of at least {MIN_COMMITMENT_CHARS} characters to issue your card."
)


class ValidationError(ValueError):
    """User input rejected. The message is safe to show on screen."""


class InvalidTransition(RuntimeError):
    pass


class StepController:
    def __init__(
        self,
        questions,
        profiles,
        scheduler,
        analyzing_delay_ms=ANALYZING_DELAY_MS,
        advance_delay_ms=ADVANCE_DELAY_MS,
        on_result=None,
        on_card_revealed=None,
    ):
        self.profiles = profiles
        self.scheduler = scheduler
        self.analyzing_delay_ms = analyzing_delay_ms
        self.on_result = on_result
        self.on_card_revealed = on_card_revealed
        self.session = QuizSession(questions, scheduler, advance_delay_ms=advance_delay_ms)
        self._analysis_timer = None
        self._focus_timer = None

    @property
    def step(self):
        return self.session.step

    def _require(self, step):
        if self.session.step != step:
            raise InvalidTransition(f"expected {step}, currently {self.session.step}")

    def _hook(self, fn):
        # UI hooks are cosmetic (scroll/focus); a broken one must not stall the flow
        if not callable(fn):
            return
        try:
            fn()
        except Exception as e:
            print(f"[WARN] UI hook failed: {e}")

    # ---- INTRO / IDENTIFY ----
    def start(self):
        self._require(INTRO)
        self.session.step = IDENTIFY

    def submit_name(self, text=None):
        self._require(IDENTIFY)
        if text is not None:
            self.session.set_name(text)
        if not self.session.user_name.strip():
            raise ValidationError(NAME_REQUIRED_MESSAGE)
        self.session.step = QUIZ
        print(f"[quiz] Started for {self.session.user_name}.")

    # ---- QUIZ ----
    def select_answer(self, category):
        self.session.select_answer(category)

    def go_back(self):
        self.session.go_back()

    def go_next(self):
        if not self.session.go_next():
            return
        s = self.session
        s.result = score_answers(s.answers, self.profiles, question_count=s.question_count)
        s.step = ANALYZING
        print(f"[quiz] Scored: {s.result.primary['name']} / {s.result.secondary['name']} {dict(s.result.scores)}")
        self._analysis_timer = self.scheduler.call_later(self.analyzing_delay_ms, self._finish_analysis)

    # ---- ANALYZING ----
    def _finish_analysis(self):
        self._analysis_timer = None
        if self.session.step != ANALYZING:
            return
        self.session.step = RESULT
        self._hook(self.on_result)

    def cancel_analysis(self):
        """Drop the pending ANALYZING -> RESULT timer. Returns True if one was pending."""
        if self._analysis_timer is None:
            return False
        self._analysis_timer.cancel()
        self._analysis_timer = None
        return True

    # ---- RESULT ----
    def set_commitment(self, text):
        self._require(RESULT)
        self.session.set_commitment(text)

    def reveal_card(self):
        self._require(RESULT)
        if len(self.session.commitment.strip()) < MIN_COMMITMENT_CHARS:
            raise ValidationError(COMMITMENT_TOO_SHORT_MESSAGE)
        self.session.card_revealed = True
        if self._focus_timer is not None:
            self._focus_timer.cancel()
        self._focus_timer = self.scheduler.call_later(CARD_FOCUS_DELAY_MS, self._focus_card)

    def _focus_card(self):
        self._focus_timer = None
        if self.session.card_revealed:
            self._hook(self.on_card_revealed)

    def reset(self):
        self.cancel_analysis()
        if self._focus_timer is not None:
            self._focus_timer.cancel()
            self._focus_timer = None
        self.session.reset()
