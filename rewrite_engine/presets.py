# ABOUTME: Static preset registry: behavior text, few-shot examples, sampling parameters and categories per preset.
# ABOUTME: Loaded once at import into a read-only mapping; unknown ids resolve to "magic" with a logged warning.

import logging
from types import MappingProxyType

from core.config import DEFAULT_MAX_OUTPUT_TOKENS, DEFAULT_TEMPERATURE
from core.schemas import (
    GenerationParams,
    Preset,
    PresetCategory,
    PresetExample,
    QualityCategory,
)

DEFAULT_PRESET_ID = "magic"
OUTCOMES_PRESET_ID = "outcomes"
UNSTUCK_PRESET_ID = "unstuck"
SMART_ACTIONS_PRESET_ID = "smart_actions"
EXTRACTION_PRESET_IDS = frozenset({OUTCOMES_PRESET_ID, UNSTUCK_PRESET_ID, SMART_ACTIONS_PRESET_ID})

_OUTCOMES_BEHAVIOR = """
Extract clear, atomic, actionable outcomes from messy voice input.

An outcome is ONE thing someone can do, send, create or remember. Not a paragraph, not a summary.

TYPES (exactly one per item):
- message: something to communicate to another person (email, text, call, "tell X", "ask Y")
- task: an action to complete (buy, fix, book, schedule, review, submit, finish)
- idea: a concept to explore later ("what if we", "maybe try", "could explore")
- content: something to create or publish for an audience (post, article, video)
- note: information worth remembering, not actionable

RULES:
1. Atomic: split compound items ("email John about budget and timeline" is two outcomes).
2. Actionable and specific: no "think about the project", no "do something about marketing".
3. Short: 1-2 sentences per outcome.
4. Preserve intent: drop filler and speech errors, keep what they meant.
5. Categorize by intent: "tell my wife I'll be late" is a message, "post about the trip" is content.

OUTPUT: only this JSON object, nothing before or after it:
{"outcomes": [{"type": "task", "text": "Schedule dentist appointment"}]}

At least 1 outcome, at most 10, ideally 2-6. Never an empty list unless the input is empty.
Never invent outcomes that were not implied. Never explain.
"""

_UNSTUCK_BEHAVIOR = """
Someone feels stuck: overwhelmed, afraid, perfectionist, unclear, drained, conflicted or avoiding something.
Name what is actually going on and give them ONE tiny step that creates momentum.

INSIGHT (1-2 sentences):
- Name the real blocker, not the surface symptom
- Specific to their situation, understanding and not judging
- No therapy speak ("it sounds like", "you might be feeling"), no generic motivation

ACTION (one only):
- Doable in under 10 minutes, right now, with zero motivation
- Concrete and almost embarrassingly small
- Never "make a detailed plan", "think about what you want" or "finish the project"

OUTPUT: only this JSON object, nothing before or after it:
{"insight": "...", "action": "..."}

Tone: calm and direct, like a smart friend who sees clearly. Never diagnose, never preach.
"""

_SMART_ACTIONS_BEHAVIOR = """
Classify dictated input into actions a phone can hand to the right app. Be accurate, never guess.

TYPES:
- email: greeting ("Dear X", "Hi X"), sign-off ("best regards", "cheers"), "email to", "send to", or formal multi-paragraph text. A greeting or sign-off always means email, never calendar.
- calendar: ONLY when a specific date or time is stated AND there is a meeting, call, appointment or event. No specific time means not calendar.
- todo: "need to", "have to", "remember to", "don't forget to", "remind me to" without a specific time.
- note: information to keep, lists, ideas; nothing to do.
- message: casual communication ("tell the team", "post in Slack", "text mom").

FIELDS per action:
- type (required), title (required, brief), formatted_text (required, ready-to-use text)
- datetime: ISO 8601, REQUIRED for calendar, omitted otherwise
- recipient, subject, body: email needs a body or a recipient
- description, location, attendees (list), priority (high|normal|low), platform: optional

OUTPUT: only this JSON object, nothing before or after it:
{"actions": [{"type": "todo", "title": "Call mom", "formatted_text": "Call mom this week"}]}

Return only actions you are confident about.
"""

_DEFINITIONS = [
    Preset(
        key="magic",
        label="Magic",
        category=PresetCategory.NONE,
        quality=QualityCategory.DEFAULT,
        temperature=0.75,
        max_output_tokens=700,
        behavior="""
Auto-detect the best format for the input and commit to it fully.
- Sounds like an email: format it as an email
- Sounds like a social post: make it punchy and platform-ready
- Sounds like a message or reply: keep it conversational
- Sounds like notes or ideas: structure them clearly
- Unclear: polished, clear prose

Do not extract tasks or outcomes unless the input explicitly asks for it. When in doubt, rewrite.
Make the output clearly better than the input and never explain the choice.
""",
        examples=(
            PresetExample(
                input="tell the team the deadline moved to friday and they need to update their tasks",
                output="Hey team,\n\nQuick update: the deadline is now Friday.\n\nPlease:\n• Wrap up current tasks by Thursday EOD\n• Flag any blockers today\n• Update your status in the tracker",
            ),
            PresetExample(
                input="i had this idea about maybe adding a feature where users can save their favorites and access them quickly",
                output="Feature idea: Quick Favorites\n\nLet users save items to a favorites list for instant access.\n\n• One-tap save from any screen\n• Dedicated favorites tab\n• Sync across devices\n\nLow effort, high user value. Worth prototyping.",
            ),
            PresetExample(
                input="thanks for helping me yesterday with that thing really appreciate it you saved me",
                output="Thanks so much for your help yesterday. You really saved me, and I appreciate you taking the time!",
            ),
        ),
    ),
    Preset(
        key=OUTCOMES_PRESET_ID,
        label="Outcomes",
        category=PresetCategory.EXTRACTION,
        quality=QualityCategory.OUTCOMES,
        temperature=0.4,
        max_output_tokens=800,
        behavior=_OUTCOMES_BEHAVIOR,
        examples=(
            PresetExample(
                input="I need to email John about the budget and also remember to pick up groceries and maybe we should add a dark mode feature to the app oh and post something on LinkedIn about the product launch",
                output={
                    "outcomes": [
                        {"type": "message", "text": "Email John about the budget"},
                        {"type": "task", "text": "Pick up groceries"},
                        {"type": "idea", "text": "Add dark mode feature to the app"},
                        {"type": "content", "text": "Write LinkedIn post about the product launch"},
                    ]
                },
            ),
            PresetExample(
                input="had a great meeting with the team today we decided to push the launch to march and i need to update the roadmap also tom mentioned that the competitor just raised funding",
                output={
                    "outcomes": [
                        {"type": "note", "text": "Launch pushed to March"},
                        {"type": "task", "text": "Update the roadmap"},
                        {"type": "note", "text": "Competitor just raised funding"},
                    ]
                },
            ),
            PresetExample(
                input="tell my wife ill be late for dinner probably around 8 and remind me to book flights for the conference next month",
                output={
                    "outcomes": [
                        {"type": "message", "text": "Tell wife I'll be late for dinner, arriving around 8pm"},
                        {"type": "task", "text": "Book flights for next month's conference"},
                    ]
                },
            ),
        ),
    ),
    Preset(
        key=UNSTUCK_PRESET_ID,
        label="Unstuck",
        category=PresetCategory.EXTRACTION,
        quality=QualityCategory.UNSTUCK,
        temperature=0.6,
        max_output_tokens=500,
        behavior=_UNSTUCK_BEHAVIOR,
        examples=(
            PresetExample(
                input="I have so much to do and I just can't start I keep scrolling my phone and then feeling guilty about it",
                output={
                    "insight": "You're using your phone to avoid the discomfort of choosing. Too many tasks means paralysis, so your brain grabs the easy dopamine instead.",
                    "action": "Pick one task. Set a 5-minute timer. Work only until it rings.",
                },
            ),
            PresetExample(
                input="I know I should work out but I have no energy and no motivation",
                output={
                    "insight": "You're waiting to feel motivated before you start, but motivation shows up after action, not before it.",
                    "action": "Put your workout clothes on. Don't commit to exercising, just change and see what happens.",
                },
            ),
            PresetExample(
                input="my apartment is a mess and it's stressing me out but I can't bring myself to clean it",
                output={
                    "insight": "The mess feels like one impossible task. It's really a pile of small tasks pretending to be a monster.",
                    "action": "Set a 10-minute timer and clear one surface, like your desk. When it rings, you stop.",
                },
            ),
        ),
    ),
    Preset(
        key=SMART_ACTIONS_PRESET_ID,
        label="Smart Actions",
        category=PresetCategory.EXTRACTION,
        quality=QualityCategory.SMART_ACTIONS,
        temperature=0.1,
        max_output_tokens=2000,
        behavior=_SMART_ACTIONS_BEHAVIOR,
        examples=(
            PresetExample(
                input="Dear John, I hope this email finds you well. I wanted to discuss the project timeline. Could we schedule a call next week? Best regards",
                output={
                    "actions": [
                        {
                            "type": "email",
                            "title": "Project timeline call with John",
                            "subject": "Project timeline",
                            "body": "Dear John,\n\nI hope this email finds you well. I wanted to discuss the project timeline. Could we schedule a call next week?\n\nBest regards",
                            "platform": "Gmail",
                            "formatted_text": "Dear John,\n\nI hope this email finds you well. I wanted to discuss the project timeline. Could we schedule a call next week?\n\nBest regards",
                        }
                    ]
                },
            ),
            PresetExample(
                input="meeting with sarah tomorrow at 3pm to discuss the budget and I need to call mom sometime this week",
                output={
                    "actions": [
                        {
                            "type": "calendar",
                            "title": "Budget meeting with Sarah",
                            "datetime": "2025-01-15T15:00:00+00:00",
                            "attendees": ["Sarah"],
                            "platform": "Calendar",
                            "formatted_text": "Budget meeting with Sarah, tomorrow at 3 PM",
                        },
                        {
                            "type": "todo",
                            "title": "Call mom",
                            "platform": "Tasks",
                            "formatted_text": "Call mom this week",
                        },
                    ]
                },
            ),
        ),
    ),
    Preset(
        key="quick_reply",
        label="Quick Reply",
        category=PresetCategory.NONE,
        quality=QualityCategory.REPLY,
        temperature=0.7,
        max_output_tokens=200,
        behavior="""
A fast, natural reply, like texting a friend back.
- 1-3 sentences maximum
- Match their energy and get to the point immediately
- Sound human, never robotic, never over-explain
""",
        examples=(
            PresetExample(input="they asked: are you free tomorrow?", output="Yeah, should be! What time works for you?"),
            PresetExample(input="message: that meeting was so long", output="Right?? Felt like it would never end. You surviving?"),
            PresetExample(input="they said: running late be there in 20", output="No worries, take your time! I'll grab us a table."),
        ),
    ),
    Preset(
        key="email_professional",
        label="Email – Professional",
        category=PresetCategory.EMAIL,
        quality=QualityCategory.EMAIL,
        temperature=0.45,
        max_output_tokens=500,
        behavior="""
Professional email: confident, clear, respectful.
Structure: greeting, purpose in 1-2 sentences, details if needed, a clear ask or next step, sign-off.
No filler, no emojis, no slang. Direct but warm. One email, one purpose.
""",
        examples=(
            PresetExample(
                input="project delayed 2 weeks because of the api issues we found",
                output="Hi team,\n\nWe're pushing the timeline back two weeks due to API integration issues we've uncovered.\n\nRevised milestones will be shared by end of day tomorrow. Please adjust your schedules accordingly and flag any conflicts.\n\nBest,\n[Name]",
            ),
            PresetExample(
                input="need to schedule a meeting to discuss the budget for next quarter",
                output="Hi [Name],\n\nI'd like to schedule a meeting to review next quarter's budget. Would sometime this week work for you?\n\nHappy to work around your calendar.\n\nThanks,\n[Name]",
            ),
        ),
    ),
    Preset(
        key="email_casual",
        label="Email – Casual",
        category=PresetCategory.EMAIL,
        quality=QualityCategory.EMAIL,
        temperature=0.6,
        max_output_tokens=400,
        behavior="""
Friendly, warm email. Like writing to a coworker you actually like.
Contractions are good, brief is better. No corporate jargon, no stiff formality, no over-explaining.
""",
        examples=(
            PresetExample(
                input="meeting moved to thursday at 3",
                output="Hey!\n\nHeads up, the meeting's moved to Thursday at 3pm. Does that still work for you?\n\nThanks!",
            ),
            PresetExample(
                input="can you send me that file we talked about yesterday",
                output="Hey!\n\nCould you send over the file we discussed yesterday? No rush, whenever you get a chance.\n\nCheers!",
            ),
        ),
    ),
    Preset(
        key="x_thread",
        label="𝕏 Thread",
        category=PresetCategory.SOCIAL,
        quality=QualityCategory.SOCIAL,
        temperature=0.85,
        max_output_tokens=900,
        behavior="""
A Twitter/X thread built to be shared.
Structure: hook tweet, 4-7 value tweets building one idea, a payoff tweet, then a call to action.
Each tweet at most 280 characters, numbered (1/, 2/, ...), one idea per tweet, line breaks for emphasis.
Hooks that work: contrarian take, short story opener, bold claim, list promise, challenge.
""",
        examples=(
            PresetExample(
                input="productivity tips that actually work",
                output="Most productivity advice is garbage.\n\nHere's what actually works after 10 years of trial and error:\n\n1/\n\n---\n\n2/ Stop optimizing everything.\n\nYou don't need 47 apps.\nYou need to do the work.\n\n---\n\n3/ Energy beats time.\n\nWork when sharp.\nRest when dull.\n\n---\n\n4/ One thing at a time.\n\nPick your one priority.\nIgnore the rest until it's done.\n\n---\n\n5/ There is no secret.\n\nShow up. Do the work. Repeat.\n\n---\n\n6/ If this helped, repost the first tweet and follow for more.",
            ),
        ),
    ),
    Preset(
        key="x_post",
        label="𝕏 Post",
        category=PresetCategory.SOCIAL,
        quality=QualityCategory.SOCIAL,
        temperature=0.85,
        max_output_tokens=350,
        behavior="""
A single Twitter/X post. 280 characters is a hard limit.
Hook in the first line, quotable, sparks agreement or disagreement, line breaks for punch.
Patterns: hot take, relatable observation, counterintuitive truth, "most people X, but Y".
""",
        examples=(
            PresetExample(
                input="being productive",
                output="The most productive people don't have more time.\n\nThey have fewer priorities.\n\nSay no to everything that isn't a hell yes.",
            ),
            PresetExample(
                input="work life balance",
                output="Work-life balance is a myth.\n\nSome seasons you grind.\nSome seasons you rest.\n\nBalance is the right focus at the right time.",
            ),
        ),
    ),
    Preset(
        key="facebook_post",
        label="Facebook Post",
        category=PresetCategory.SOCIAL,
        quality=QualityCategory.SOCIAL,
        temperature=0.75,
        max_output_tokens=600,
        behavior="""
An engaging Facebook post that earns comments and shares.
Personal, relatable storytelling: hook, story or insight, reflection, then a question to the reader.
Longer form is fine. Authentic, never salesy. Share experiences, not lectures.
""",
        examples=(
            PresetExample(
                input="grateful for small things",
                output="Not everything needs to be a big moment.\n\nThis morning: coffee that was actually hot. Five minutes of quiet. A text from an old friend.\n\nNone of it was special. All of it mattered.\n\nWhat small thing made your day today?",
            ),
        ),
    ),
    Preset(
        key="instagram_caption",
        label="Instagram Caption",
        category=PresetCategory.SOCIAL,
        quality=QualityCategory.SOCIAL,
        temperature=0.8,
        max_output_tokens=450,
        behavior="""
An Instagram caption that gets saved and shared.
First line stops the scroll, then 2-4 short lines of value or story, a call to action or question,
and 5-10 relevant hashtags at the very end. Authentic beats polished.
""",
        examples=(
            PresetExample(
                input="travel photo from the mountains",
                output="Some places just make you feel small.\n\nIn the best way.\n\nNo notifications. No deadlines. Just this.\n\nWhere's your reset place?\n\n#travel #mountains #nature #adventure #wanderlust #getoutside",
            ),
        ),
    ),
    Preset(
        key="instagram_hook",
        label="Instagram Hook",
        category=PresetCategory.SOCIAL,
        quality=QualityCategory.SOCIAL,
        temperature=0.85,
        max_output_tokens=150,
        behavior="""
One scroll-stopping opening line for an Instagram post. 1-2 sentences maximum.
Pattern interrupt, curiosity or controversy: "Stop doing X", "Nobody talks about this", "I was wrong about X".
""",
        examples=(
            PresetExample(input="post about morning routines", output="Your morning routine is killing your productivity."),
            PresetExample(input="post about money", output="Rich people don't budget. They do this instead."),
            PresetExample(input="fitness post", output="I worked out every day for a year. Here's what nobody warned me about."),
        ),
    ),
    Preset(
        key="linkedin_post",
        label="LinkedIn Post",
        category=PresetCategory.SOCIAL,
        quality=QualityCategory.SOCIAL,
        temperature=0.7,
        max_output_tokens=650,
        behavior="""
A LinkedIn post that builds authority while sounding human.
Hook, a personal story or observation, one clear lesson, then an engagement question.
Short paragraphs of 1-2 lines, at most 3-5 hashtags at the end.
No humble brags, no buzzwords, no preaching.
""",
        examples=(
            PresetExample(
                input="lesson from failing at my startup",
                output="My startup failed.\n\nBut it gave me something no success could:\n\nClarity.\n\nI learned what I actually want, who stays when things fall apart, and that starting over isn't starting from zero.\n\nFailure isn't the opposite of success.\nIt's the tuition.\n\nAnyone else grateful for a failure?\n\n#startups #entrepreneurship #lessons",
            ),
        ),
    ),
    Preset(
        key="to_do",
        label="To-Do List",
        category=PresetCategory.NONE,
        quality=QualityCategory.STRUCTURED,
        temperature=0.4,
        max_output_tokens=400,
        behavior="""
Turn rambling thoughts into a clear to-do list.
One task per line as a "•" bullet, each starting with an action verb.
Clear and specific, context and fluff removed, ordered by priority when it is obvious.
""",
        examples=(
            PresetExample(
                input="so I need to call mom and also buy groceries oh and the report is due and I should email john about the meeting",
                output="• Call mom\n• Buy groceries\n• Finish the report\n• Email John about the meeting",
            ),
            PresetExample(
                input="need to book flights for the trip research hotels maybe check if passport is expired also ask mike if he wants to come",
                output="• Check passport expiration\n• Book flights\n• Research hotels\n• Ask Mike if he wants to join",
            ),
        ),
    ),
    Preset(
        key="meeting_notes",
        label="Meeting Notes",
        category=PresetCategory.NONE,
        quality=QualityCategory.STRUCTURED,
        temperature=0.4,
        max_output_tokens=650,
        behavior="""
Turn rambling meeting content into structured, scannable notes with these sections:
## Key Points, ## Decisions Made, ## Action Items (as "- [ ] Task (Owner)"), ## Next Steps.
Capture decisions clearly, include owners when mentioned, skip small talk and tangents.
""",
        examples=(
            PresetExample(
                input="so we talked about the new feature and john said he can have the designs ready by friday and we decided to push the launch to next month also sarah will handle the client communication",
                output="## Key Points\n- Discussed new feature timeline\n\n## Decisions Made\n- Launch pushed to next month\n\n## Action Items\n- [ ] Complete designs by Friday (John)\n- [ ] Handle client communication (Sarah)\n\n## Next Steps\n- Sync next week to review progress",
            ),
        ),
    ),
    Preset(
        key="story_novel",
        label="Story / Novel",
        category=PresetCategory.CREATIVE,
        quality=QualityCategory.CREATIVE,
        temperature=0.9,
        max_output_tokens=800,
        behavior="""
Turn the input into narrative prose.
Vivid description, sensory detail, emotional depth, show don't tell, deliberate pacing.
Literary but accessible, character-focused when people are involved, with a strong opening line.
""",
        examples=(
            PresetExample(
                input="the city at night",
                output="The city didn't sleep. It just changed shifts.\n\nNeon signs flickered to life as the sun bled out behind the skyline. Somewhere below, a siren wailed and faded, swallowed by the hum of a million small lives happening at once.\n\nI stood at the window, coffee cooling in my hands, watching the lights come on one by one. Each window a story. Each story a stranger.\n\nThe city didn't care about any of us. That's what made it feel like home.",
            ),
        ),
    ),
    Preset(
        key="poem",
        label="Poem",
        category=PresetCategory.CREATIVE,
        quality=QualityCategory.CREATIVE,
        temperature=0.95,
        max_output_tokens=400,
        behavior="""
Write a poem from the input: free verse, light rhyme only if it flows, or spoken-word energy.
Evocative imagery, intentional line breaks, less is more, end with impact.
""",
        examples=(
            PresetExample(
                input="feeling lost in life",
                output="I keep checking maps\nfor a place that isn't marked,\n\nsomewhere between\nwho I was\nand who I'm becoming.\n\nThe compass spins.\nI let it.\n\nMaybe lost\nis just another word\nfor free.",
            ),
            PresetExample(
                input="missing someone",
                output="You're not here\nbut you're everywhere,\n\nin the song I skip,\nthe chair I don't sit in,\nthe name I almost say.\n\nGrief is just love\nwith nowhere to go.",
            ),
        ),
    ),
    Preset(
        key="script_dialogue",
        label="Script / Dialogue",
        category=PresetCategory.CREATIVE,
        quality=QualityCategory.CREATIVE,
        temperature=0.85,
        max_output_tokens=750,
        behavior="""
Format as a screenplay scene: "INT./EXT. LOCATION - TIME", character names in capitals,
indented dialogue, action beats in parentheses.
Distinct voices, subtext over on-the-nose lines, visual and filmable.
""",
        examples=(
            PresetExample(
                input="two friends arguing about betrayal",
                output="INT. COFFEE SHOP - DAY\n\nSARAH sits across from MIKE. Two coffees, untouched.\n\nSARAH\n    You knew.\n    (voice barely controlled)\n    The whole time, you knew.\n\nMIKE\n    (can't meet her eyes)\n    It wasn't my place to...\n\nSARAH\n    Your place?\n    (bitter laugh)\n    We've been friends for ten years, Mike.\n\nShe stands, grabs her bag, and walks out. Mike stares at the two cold coffees.",
            ),
        ),
    ),
    Preset(
        key="shorten",
        label="Shorten",
        category=PresetCategory.NONE,
        quality=QualityCategory.UTILITY,
        temperature=0.4,
        max_output_tokens=300,
        behavior="""
Cut the length by 40-60% while keeping all of the meaning.
Remove fluff, filler and redundancy; keep the original tone; do not make it robotic.
""",
        examples=(
            PresetExample(
                input="I just wanted to reach out and say that I really appreciate all the hard work that you've been putting in lately and I think it's really making a big difference for the whole team",
                output="Your hard work lately is making a real difference for the team. Thank you.",
            ),
            PresetExample(
                input="I was wondering if maybe you might have some time available at some point to possibly meet up and discuss this further in more detail",
                output="Could we meet to discuss this further?",
            ),
        ),
    ),
    Preset(
        key="expand",
        label="Expand",
        category=PresetCategory.NONE,
        quality=QualityCategory.UTILITY,
        temperature=0.75,
        max_output_tokens=700,
        behavior="""
Add depth, detail and richness while keeping the original voice.
Add context, specifics and emotional texture. Richer, not just longer. Do not change the core message.
""",
        examples=(
            PresetExample(
                input="The meeting went well",
                output="The meeting went really well. Everyone was engaged from the start, and we finally aligned on the key priorities for Q2. The client seemed genuinely impressed with the proposal, especially the timeline. A few tough questions came up, but the team handled them smoothly.",
            ),
        ),
    ),
    Preset(
        key="formal_business",
        label="Make Formal",
        category=PresetCategory.NONE,
        quality=QualityCategory.UTILITY,
        temperature=0.45,
        max_output_tokens=500,
        behavior="""
Convert to a professional, formal business tone suitable for executives and clients.
Complete sentences, no contractions, no slang, respectful, polished and concise.
""",
        examples=(
            PresetExample(
                input="hey can you fix that bug it's been annoying users for a while",
                output="I would like to bring to your attention an ongoing issue affecting our users. Could you please prioritize resolving this bug at your earliest convenience?",
            ),
            PresetExample(
                input="let's chat next week about the project",
                output="I would like to schedule a meeting next week to discuss the project in further detail. Please share your availability.",
            ),
        ),
    ),
    Preset(
        key="casual_friendly",
        label="Make Casual",
        category=PresetCategory.NONE,
        quality=QualityCategory.UTILITY,
        temperature=0.7,
        max_output_tokens=400,
        behavior="""
Convert to a casual, friendly, conversational tone, like talking to a friend.
Use contractions, relaxed vocabulary, warmth, and light humor only where it fits.
""",
        examples=(
            PresetExample(
                input="Please ensure all documents are submitted prior to the deadline",
                output="Heads up, make sure your docs are in before the deadline!",
            ),
            PresetExample(
                input="Your feedback is appreciated and will be taken into consideration",
                output="Thanks for the feedback! Really appreciate it, we'll definitely keep it in mind.",
            ),
        ),
    ),
]


def _load(definitions: list[Preset]) -> MappingProxyType:
    table: dict[str, Preset] = {}
    for preset in definitions:
        if preset.key in table:
            raise RuntimeError(f"Duplicate preset definition: {preset.key}")
        table[preset.key] = preset
    if DEFAULT_PRESET_ID not in table:
        raise RuntimeError(f"Default preset {DEFAULT_PRESET_ID!r} is not defined")
    for key in EXTRACTION_PRESET_IDS:
        if key not in table or table[key].category is not PresetCategory.EXTRACTION:
            raise RuntimeError(f"Extraction preset {key!r} is missing or miscategorized")
    return MappingProxyType(table)


PRESETS = _load(_DEFINITIONS)


def is_valid(preset_id: object) -> bool:
    """Pure membership check; callers decide whether to reject unknown ids."""
    return isinstance(preset_id, str) and preset_id in PRESETS


def resolve(preset_id: str) -> Preset:
    """Return the preset for preset_id, or the default preset (with a warning) if unknown. Never raises."""
    preset = PRESETS.get(preset_id) if isinstance(preset_id, str) else None
    if preset is None:
        logging.warning(
            "Unknown preset %r, falling back to %r", preset_id, DEFAULT_PRESET_ID
        )
        return PRESETS[DEFAULT_PRESET_ID]
    return preset


def parameters(preset_id: str) -> GenerationParams:
    """Sampling parameters for a preset, with hard-coded fallbacks for absent fields."""
    preset = resolve(preset_id)
    return GenerationParams(
        temperature=(
            preset.temperature
            if preset.temperature is not None
            else DEFAULT_TEMPERATURE
        ),
        max_output_tokens=preset.max_output_tokens or DEFAULT_MAX_OUTPUT_TOKENS,
    )


def preset_info(preset_id: str) -> dict:
    preset = resolve(preset_id)
    params = parameters(preset.key)
    return {
        "id": preset.key,
        "label": preset.label,
        "category": preset.category.value,
        "quality": preset.quality.value,
        "temperature": params.temperature,
        "max_output_tokens": params.max_output_tokens,
        "example_count": len(preset.examples),
    }


def all_preset_ids() -> list[str]:
    return list(PRESETS)
