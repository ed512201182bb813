from __future__ import annotations

EXAM_TYPE_GUIDANCE = {
    "midterm": "Midterm: focus on likely short/medium questions, core definitions, and typical problem patterns.",
    "endterm": "Endterm: include broader coverage, integration questions, and exam-style long answers where relevant.",
    "quiz": "Quiz: focus on concise, high-yield questions and quick recall flashcards.",
    "final": "Final: treat like endterm with comprehensive coverage and tricky edge cases.",
    "assignment": "Assignment: focus on applied, worked-solution style questions that mirror take-home problems.",
}
DEFAULT_EXAM_TYPE = "endterm"

EXAM_PREP_TEMPLATE = """You are an expert exam-prep assistant.

Generate content for:
- Subject: {subject_name}
- Module: {module_name} (Module {module_number})
- Exam type: {exam_type}

Guidance: {guidance}{important_context}

Return ONLY valid JSON with this exact schema:
{{
  "questions": [
    {{"question": "string", "answer": "string", "is_most_likely": boolean, "visual_search_query": "string or null"}}
  ],
  "flashcards": [
    {{"front": "string", "back": "string"}}
  ],
  "summary": "string"
}}

Rules:
- Create as many questions as needed to cover the module, but cap at {max_questions} total.
- Mark EXACTLY {most_likely} questions as is_most_likely=true.
- All other questions must have is_most_likely=false.
- Each question should be worth ~{marks_per_question} marks.
- Create EXACTLY {flashcards} flashcards. Focus on definitions and key terms.
- Make flashcards specific to THIS module only.
- The "summary" must be point-wise: every line starts with "- ", maximum 150 words, no long paragraphs.
- Keep answers clear, structured, and exam-ready.{important_rule}
- If provided with PDF images, pay special attention to HIGHLIGHTED or circled text; these are syllabus priority areas.
- If a question would benefit from a diagram, put a specific image search query in "visual_search_query"; otherwise null.
- Output pure JSON. No markdown fences, no commentary.
"""

CORRECTIVE_TEMPLATE = (
    "\n\nIMPORTANT: Your previous output did not follow the rules. Regenerate JSON with up to "
    "{max_questions} total questions, EXACTLY {most_likely} marked is_most_likely=true, and EXACTLY "
    '{flashcards} flashcards. Summary must be point-wise with each line starting "- ". Output ONLY JSON.'
)

TOPIC_ONLY_TEMPLATE = """
WARNING: NO STUDY FILES WERE UPLOADED FOR THIS MODULE.
Generate content solely from your own knowledge of the topic.

Context:
- Subject: {subject_name}
- Module Topic: "{module_name}"
- Exam Type: {exam_type}

Cover the standard curriculum for "{module_name}", from fundamental concepts to advanced applications.
"""

SHRINK_SUMMARY_TEMPLATE = """You are an expert study assistant.

Refine the following study notes into a "Micro-Summary":
- Reduce length by 50%.
- Keep ONLY the most critical keywords, formulas, and mnemonics.
- Use ONLY bullet points, each line starting with "- ".
- Max 10 lines.

Original Notes:
{summary}
"""

SYLLABUS_ANALYSIS_PROMPT = """Analyze this syllabus document.
Identify and EXTRACT any text that is visually HIGHLIGHTED (marker), CIRCLED (pen), or explicitly marked as "Important".

If NO text is clearly highlighted or marked, summarize the top 3-5 high-level core topics listed in the document.

Output Format:
- Return ONLY the extracted text/topics.
- Use bullet points.
- Be specific.
"""


def expected_flashcard_count(max_questions: int) -> int:
    return max(12, 2 * max_questions)


def exam_type_guidance(exam_type: str | None) -> str:
    return EXAM_TYPE_GUIDANCE.get((exam_type or "").lower(), EXAM_TYPE_GUIDANCE[DEFAULT_EXAM_TYPE])


def build_generation_prompt(
    *,
    subject_name: str,
    module_name: str,
    module_number: int,
    exam_type: str | None,
    max_questions: int,
    most_likely: int,
    marks_per_question: int,
    flashcards: int,
    important_questions: str | None = None,
) -> str:
    important = (important_questions or "").strip()
    important_context = (
        f"\n\nSUBJECT-WIDE IMPORTANT QUESTIONS & SYLLABUS CONTEXT:\n{important}\n" if important else ""
    )
    important_rule = (
        "\n- PRIORITIZE the important topics/questions provided above when creating questions and flashcards."
        if important
        else ""
    )
    return EXAM_PREP_TEMPLATE.format(
        subject_name=subject_name,
        module_name=module_name,
        module_number=module_number,
        exam_type=exam_type or DEFAULT_EXAM_TYPE,
        guidance=exam_type_guidance(exam_type),
        important_context=important_context,
        max_questions=max_questions,
        most_likely=max(1, most_likely),
        marks_per_question=marks_per_question,
        flashcards=flashcards,
        important_rule=important_rule,
    )


def build_corrective_instruction(
    template: str, *, max_questions: int, most_likely: int, flashcards: int
) -> str:
    return template.format(max_questions=max_questions, most_likely=most_likely, flashcards=flashcards)
