# brain_data.py
# Edit/extend questions & brain-type profiles here.
# Option order matters: it sets the A/B/C/D labels on screen.

CHEETAH = "CHEETAH"
OWL = "OWL"
DOLPHIN = "DOLPHIN"
ELEPHANT = "ELEPHANT"

# Canonical order. Used for zero-initialising tallies and for tie-breaks.
CATEGORIES = (CHEETAH, OWL, DOLPHIN, ELEPHANT)

QUESTIONS = [
    {
        "prompt": "You get a new gadget with a thick manual. What do you do?",
        "options": [
            ("Switch it on and figure it out as I go", CHEETAH),
            ("Read the manual front to back first", OWL),
            ("Skim the pictures and imagine what it could do", DOLPHIN),
            ("Ask a friend who already owns one", ELEPHANT),
        ],
    },
    {
        "prompt": "A big exam is two weeks away. Your plan?",
        "options": [
            ("A detailed day-by-day schedule", OWL),
            ("Short sprints with a hard target each day", CHEETAH),
            ("A study group that keeps me accountable", ELEPHANT),
            ("Mind maps and colourful notes", DOLPHIN),
        ],
    },
    {
        "prompt": "In a team meeting you are usually the one who...",
        "options": [
            ("Pitches the wild new idea", DOLPHIN),
            ("Makes sure everyone is heard", ELEPHANT),
            ("Pushes for a decision", CHEETAH),
            ("Checks the numbers", OWL),
        ],
    },
    {
        "prompt": "Which compliment feels best?",
        "options": [
            ("You get things done", CHEETAH),
            ("You are so thorough", OWL),
            ("You are so original", DOLPHIN),
            ("You really care about people", ELEPHANT),
        ],
    },
    {
        "prompt": "How do you remember a new name?",
        "options": [
            ("I link it to a feeling about the person", ELEPHANT),
            ("I picture something funny with it", DOLPHIN),
            ("I repeat it right away in conversation", CHEETAH),
            ("I note how it is spelled and where it comes from", OWL),
        ],
    },
    {
        "prompt": "Your ideal weekend looks like...",
        "options": [
            ("A packed list of things to tick off", CHEETAH),
            ("A quiet day with a good non-fiction book", OWL),
            ("Wandering somewhere new with no plan", DOLPHIN),
            ("Long dinner with people I love", ELEPHANT),
        ],
    },
    {
        "prompt": "When a project stalls you...",
        "options": [
            ("Break it down and find the bottleneck", OWL),
            ("Talk it through with the team", ELEPHANT),
            ("Look at it from a totally different angle", DOLPHIN),
            ("Just pick the next step and move", CHEETAH),
        ],
    },
    {
        "prompt": "What drains you the fastest?",
        "options": [
            ("Waiting on slow decisions", CHEETAH),
            ("Sloppy work and vague facts", OWL),
            ("Repetitive routines", DOLPHIN),
            ("Conflict and cold atmospheres", ELEPHANT),
        ],
    },
    {
        "prompt": "You learn best when the teacher...",
        "options": [
            ("Tells a story you can feel", ELEPHANT),
            ("Gets straight to the point", CHEETAH),
            ("Explains the logic step by step", OWL),
            ("Lets you experiment freely", DOLPHIN),
        ],
    },
    {
        "prompt": "Your desk is usually...",
        "options": [
            ("Sorted and labelled", OWL),
            ("Creative chaos", DOLPHIN),
            ("Bare, only what I need right now", CHEETAH),
            ("Covered in photos and notes from friends", ELEPHANT),
        ],
    },
    {
        "prompt": "Picking a restaurant for a group, you...",
        "options": [
            ("Choose quickly so we can go", CHEETAH),
            ("Compare reviews and prices", OWL),
            ("Suggest the strange new place", DOLPHIN),
            ("Ask what everyone is in the mood for", ELEPHANT),
        ],
    },
    {
        "prompt": "Reading a long article, you tend to...",
        "options": [
            ("Jump to the conclusion", CHEETAH),
            ("Highlight the key facts", OWL),
            ("Drift into my own related ideas", DOLPHIN),
            ("Think about who I should send it to", ELEPHANT),
        ],
    },
    {
        "prompt": "Which goal sounds most exciting?",
        "options": [
            ("Win the competition", CHEETAH),
            ("Master the subject completely", OWL),
            ("Invent something nobody has seen", DOLPHIN),
            ("Build a community around it", ELEPHANT),
        ],
    },
    {
        "prompt": "Under pressure you...",
        "options": [
            ("Get faster and sharper", CHEETAH),
            ("Slow down and double-check", OWL),
            ("Improvise", DOLPHIN),
            ("Look for support", ELEPHANT),
        ],
    },
    {
        "prompt": "What kind of notes do you keep?",
        "options": [
            ("Bullet points and to-dos", CHEETAH),
            ("Structured outlines", OWL),
            ("Doodles and sketches", DOLPHIN),
            ("Quotes that moved me", ELEPHANT),
        ],
    },
    {
        "prompt": "Friends come to you when they need...",
        "options": [
            ("Someone to make it happen", CHEETAH),
            ("A clear, honest analysis", OWL),
            ("Fresh inspiration", DOLPHIN),
            ("A good listener", ELEPHANT),
        ],
    },
    {
        "prompt": "Learning a new language, you would start with...",
        "options": [
            ("The grammar rules", OWL),
            ("Songs and films", DOLPHIN),
            ("A conversation partner", ELEPHANT),
            ("The hundred most useful phrases", CHEETAH),
        ],
    },
    {
        "prompt": "A surprise change of plans makes you feel...",
        "options": [
            ("Excited, something new", DOLPHIN),
            ("Worried about how others are affected", ELEPHANT),
            ("Impatient to re-plan fast", CHEETAH),
            ("Uneasy until I understand why", OWL),
        ],
    },
    {
        "prompt": "Which tool would you grab first?",
        "options": [
            ("A stopwatch", CHEETAH),
            ("A spreadsheet", OWL),
            ("A sketchbook", DOLPHIN),
            ("A group chat", ELEPHANT),
        ],
    },
    {
        "prompt": "At the end of the day you feel best when...",
        "options": [
            ("I finished everything on my list", CHEETAH),
            ("I understood something deeply", OWL),
            ("I created something new", DOLPHIN),
            ("I helped someone", ELEPHANT),
        ],
    },
]

PROFILES = {
    CHEETAH: {
        "name": "Cheetah",
        "english_name": "Cheetah · Action",
        "color": (242, 153, 0),
        "description": "Fast, decisive and goal-driven. You learn by doing and love a clear finish line.",
        "partner": "Owl",
        "blind_spot": "Speed can skip the details. Pause before you commit to the first answer.",
        "reading_strategy": [
            "Set a timer and read in 25-minute sprints.",
            "Write the one question you want answered before you start.",
            "Summarise each chapter in a single sentence.",
        ],
        "memory_strategy": [
            "Turn facts into a checklist you can tick off.",
            "Teach what you learned within 24 hours.",
            "Review in short bursts spread over the week.",
        ],
    },
    OWL: {
        "name": "Owl",
        "english_name": "Owl · Order",
        "color": (79, 70, 229),
        "description": "Analytical, precise and methodical. You trust evidence and love to see how things fit.",
        "partner": "Dolphin",
        "blind_spot": "Analysis can stall action. Set a deadline for deciding.",
        "reading_strategy": [
            "Preview headings and summaries before reading.",
            "Keep a running outline as you go.",
            "Challenge each claim with one question.",
        ],
        "memory_strategy": [
            "Group facts into clear categories.",
            "Use numbered lists and acronyms.",
            "Rebuild the structure from memory, then compare.",
        ],
    },
    DOLPHIN: {
        "name": "Dolphin",
        "english_name": "Dolphin · Dream",
        "color": (14, 165, 233),
        "description": "Creative, curious and big-picture. You learn through imagination and play.",
        "partner": "Elephant",
        "blind_spot": "New ideas can crowd out finishing. Pick one to complete first.",
        "reading_strategy": [
            "Sketch a mind map while you read.",
            "Ask what if at the end of every section.",
            "Switch locations to keep attention fresh.",
        ],
        "memory_strategy": [
            "Turn facts into vivid, absurd images.",
            "Build a memory palace for long lists.",
            "Link new ideas to a story you already know.",
        ],
    },
    ELEPHANT: {
        "name": "Elephant",
        "english_name": "Elephant · Empathy",
        "color": (16, 185, 129),
        "description": "Warm, loyal and people-centred. You learn best with and for others.",
        "partner": "Cheetah",
        "blind_spot": "Caring for everyone can leave you last. Protect time for your own goals.",
        "reading_strategy": [
            "Read with a partner and discuss.",
            "Ask who this book could help.",
            "Note how each idea would feel in real life.",
        ],
        "memory_strategy": [
            "Attach facts to the people who told you.",
            "Explain ideas out loud as if to a friend.",
            "Use emotion: recall how the moment felt.",
        ],
    },
}


def option_label(index):
    return chr(ord("A") + index)


def validate_content(questions, profiles):
    """Raise ValueError if the content table cannot drive a quiz."""
    if not questions:
        raise ValueError("content has no questions")
    for cat in CATEGORIES:
        if cat not in profiles:
            raise ValueError(f"missing profile for category {cat!r}")
    for i, q in enumerate(questions):
        options = q.get("options") or []
        if not options:
            raise ValueError(f"question {i} has no options")
        for label, cat in options:
            if cat not in CATEGORIES:
                raise ValueError(f"question {i} option {label!r} has unknown category {cat!r}")
