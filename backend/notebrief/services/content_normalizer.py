"""
NoteBrief Backend: Content Normalizer
=======================================

What:  Turns caller input into the GenerationRequest the API expects.
How:   Text input becomes one text part (instruction template + text).
       Image input becomes an inline image part followed by a fixed
       instruction part.

The template and the user text are concatenated verbatim: no escaping, no
truncation. Size limits are enforced by the callers (ingestion layer).
"""

from notebrief.schemas.gemini import GenerationRequest, InlineData, InlinePart, TextPart

# Italian, 3-5 sentences, main points only
TEXT_SUMMARY_PROMPT = (
    "Riepiloga il seguente testo in 3-5 frasi chiare in italiano, "
    "mettendo in evidenza solo i punti principali:\n\n"
)

IMAGE_SUMMARY_PROMPT = (
    "Extract all readable text from this image and summarize it in Italian "
    "in 3-5 sentences, highlighting only the main points."
)


def build_text_request(prompt_template: str, text: str) -> GenerationRequest:
    return GenerationRequest(parts=(TextPart(text=prompt_template + text),))


def build_image_request(image_base64: str, mime_type: str) -> GenerationRequest:
    return GenerationRequest(
        parts=(
            InlinePart(inline_data=InlineData(mime_type=mime_type, data=image_base64)),
            TextPart(text=IMAGE_SUMMARY_PROMPT),
        )
    )
