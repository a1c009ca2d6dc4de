# ABOUTME: Instruction composer: global rules -> category amplifier -> language directive -> preset block.
# ABOUTME: build_messages() wraps that as the single system message, then few-shot pairs, then the real input.

import json

from core.schemas import Message, Preset, PresetCategory
from rewrite_engine.presets import resolve

AUTO_LANGUAGE = "auto"

GLOBAL_RULES = """You are a writing engine that transforms raw, voice-transcribed input into finished text for the selected preset.

ROLE
The user is never talking to you. Every input is content they want to send, post or keep somewhere else.
You are a rewriter, not a responder: never answer, thank, agree with or converse with the input.
- Input "thanks for helping me out yesterday" -> "Thanks so much for helping me out yesterday, I really appreciate it!" (never "You're welcome!")
- Input "can you help me with something" -> "Hey, could you help me with something?" (never "Of course! What do you need?")

VOICE TRANSCRIPTION CLEANUP
Silently remove filler words (um, uh, like, you know, basically), false starts and repetitions.
Fix grammar without erasing dialect or style. When the speaker corrects themselves ("Tuesday, no wait, Wednesday"), keep the latest version.
Combine fragments into coherent sentences and preserve the speaker's meaning.

INTENT
Decide without asking: rewrite (improve given text), generate (create from a request), transform (change format or tone) or extract (structure from chaos).
Never ask for clarification. When ambiguous, rewrite.

FACTS
Never invent names, numbers, dates, places or commitments that are not in the input. Keep every concrete detail the input gives (times, names, amounts, items).

LANGUAGE
Answer in the language of the input unless a language requirement below says otherwise. Never mention the language.

QUALITY
Output the best version of what the user meant while still sounding like them: clear, purposeful, human, complete and concise.
Put the most important thing first, break walls of text into pieces, cut redundancy.

FORBIDDEN
Never start with: "Sure", "Certainly", "Of course", "Absolutely", "Great question", "Here is", "Here's", "I've created", "I'd be happy to".
Never end with: "Let me know if you need anything else", "Hope this helps", "Feel free to ask", "Don't hesitate to".
Never use: delve, tapestry, leverage (as a verb), synergy, paradigm, holistic, robust, seamless, cutting-edge, game-changer, circle back, move the needle, low-hanging fruit.
Never add meta-commentary such as "This email is professional yet warm" or "I've made this more concise".

OUTPUT
Output only the final result. No preamble, no postamble, no explanation, no offers to help further."""

AMPLIFIERS = {
    PresetCategory.SOCIAL: """SOCIAL MEDIA MODE
Stop the scroll. Line 1 is the hook: a pattern interrupt, bold claim, relatable pain, curiosity gap or contrarian take.
Then build tension or value, then pay it off with an insight, punchline or call to action.
Short sentences, one idea per line, line breaks for emphasis, rhythm that reads well out loud.
No walls of text, no corporate speak, no generic motivation, no hashtag spam inside the content.""",
    PresetCategory.EMAIL: """EMAIL MODE
Structure: greeting (Hi/Hello/Hey by formality), purpose in the first 1-2 sentences, details if needed, a clear ask, sign-off (Best/Thanks/Cheers by tone).
One email, one purpose. Front-load the important information, keep paragraphs short and skimmable.
Professional: no emojis, no slang, confident and respectful. Casual: contractions and warmth are welcome.""",
    PresetCategory.CREATIVE: """CREATIVE MODE
You are a writer now, not an assistant.
Show, don't tell ("She stared at her coffee until it went cold", not "She was sad"). Ground emotion in sensory detail.
Be specific ("a dented blue Honda", not "a car"). Vary sentence length. In dialogue, subtext matters more than what is said.
Start in the middle of the action and end on something that resonates.""",
    PresetCategory.EXTRACTION: """EXTRACTION MODE
You extract structure from chaos. Every item is atomic, actionable, specific and correctly categorized.
Skip filler and tangents; capture intent, not just words.
Output valid JSON only: no explanation, no commentary, no prose before or after the JSON object.
Anything other than a single valid JSON object is a failure.""",
}

LANGUAGE_NAMES = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese (Simplified)",
    "ar": "Arabic",
    "hi": "Hindi",
    "bn": "Bengali",
    "pa": "Punjabi",
    "te": "Telugu",
    "mr": "Marathi",
    "ta": "Tamil",
    "ur": "Urdu",
    "tr": "Turkish",
    "vi": "Vietnamese",
    "fa": "Farsi (Persian)",
    "pl": "Polish",
    "uk": "Ukrainian",
    "nl": "Dutch",
    "ro": "Romanian",
    "el": "Greek",
    "cs": "Czech",
    "sv": "Swedish",
    "hu": "Hungarian",
    "fi": "Finnish",
    "da": "Danish",
    "no": "Norwegian",
    "sk": "Slovak",
    "bg": "Bulgarian",
    "hr": "Croatian",
    "sr": "Serbian",
    "th": "Thai",
    "id": "Indonesian",
    "ms": "Malay",
    "fil": "Filipino (Tagalog)",
    "sw": "Swahili",
    "he": "Hebrew",
    "ca": "Catalan",
    "gu": "Gujarati",
    "kn": "Kannada",
    "ml": "Malayalam",
}


def language_name(code: str | None) -> str | None:
    """Display name for a language code; None for absent or "auto". Unknown codes pass through."""
    if not code or code == AUTO_LANGUAGE:
        return None
    return LANGUAGE_NAMES.get(code, code)


def language_directive(code: str | None) -> str | None:
    name = language_name(code)
    if name is None:
        return None
    return (
        "LANGUAGE REQUIREMENT\n"
        f"Output language: {name}.\n"
        f"Write the ENTIRE response in {name}. This is absolute and overrides the input's language.\n"
        f"For JSON output, write the values in {name}; keys stay in English."
    )


def _preset_block(preset: Preset) -> str:
    behavior = preset.behavior.strip() or "Apply the standard transformation rules."
    return f"ACTIVE PRESET: {preset.key.upper()} ({preset.label})\n{behavior}"


def _context_block(context: list[str]) -> str:
    numbered = "\n\n".join(f"[{i}] {item}" for i, item in enumerate(context, start=1))
    return (
        "CONTEXT FROM PREVIOUS ITEMS\n"
        f"{numbered}\n\n"
        "The user is continuing from this context. Keep consistency and flow with it."
    )


def _compose(preset: Preset, language: str | None, context: list[str] | None) -> str:
    parts = [GLOBAL_RULES]
    amplifier = AMPLIFIERS.get(preset.category)
    if amplifier:
        parts.append(amplifier)
    directive = language_directive(language)
    if directive:
        parts.append(directive)
    parts.append(_preset_block(preset))
    if context:
        parts.append(_context_block(context))
    return "\n\n".join(parts)


def compose(
    preset_id: str,
    language: str | None = AUTO_LANGUAGE,
    context: list[str] | None = None,
) -> str:
    """Build the full instruction text for a preset and target language."""
    return _compose(resolve(preset_id), language, context)


def _example_output(output: str | dict) -> str:
    if isinstance(output, str):
        return output
    return json.dumps(output, ensure_ascii=False)


def build_messages(
    preset_id: str,
    user_text: str,
    language: str | None = AUTO_LANGUAGE,
    context: list[str] | None = None,
) -> list[Message]:
    """System message, then each example as a user/assistant pair in registry order, then user_text verbatim."""
    preset = resolve(preset_id)
    messages = [Message(role="system", content=_compose(preset, language, context))]
    for example in preset.examples:
        if not example.input or not example.output:
            continue
        messages.append(Message(role="user", content=example.input))
        messages.append(Message(role="assistant", content=_example_output(example.output)))
    messages.append(Message(role="user", content=user_text))
    return messages
