import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame
import pytest

from brain_data import CATEGORIES, PROFILES, QUESTIONS
from flow import StepController
from timers import Scheduler


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, start=1000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock=clock)


@pytest.fixture
def controller(scheduler):
    return StepController(QUESTIONS, PROFILES, scheduler)


@pytest.fixture
def in_quiz(controller):
    controller.start()
    controller.submit_name("  Ada  ")
    return controller


def answer_all(ctrl, category=CATEGORIES[0]):
    """Answer every question with category, stepping manually."""
    for _ in range(len(QUESTIONS)):
        ctrl.select_answer(category)
        ctrl.go_next()


@pytest.fixture
def pygame_fonts():
    pygame.font.init()
