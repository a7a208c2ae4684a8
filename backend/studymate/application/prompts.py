from __future__ import annotations


def build_extraction_prompt(ocr_text: str) -> str:
    return (
        "The following text was extracted from a photo of a study sheet. "
        "Identify every distinct question in it.\n"
        "Respond with strict JSON only, no commentary, in exactly this shape:\n"
        '{"questions": [{"id": "Q1", "question": "..."}, {"id": "Q2", "question": "..."}]}\n'
        "Use ids Q1, Q2, ... in reading order. Keep mathematical notation as LaTeX.\n\n"
        f"Extracted text:\n{ocr_text.strip()}"
    )


def build_answer_prompt(question_text: str) -> str:
    return (
        f"Question: {question_text.strip()}\n\n"
        "Solve this question step by step for a high-school student.\n"
        "Format the answer in Markdown. Write inline math between single dollar signs ($...$) "
        "and display math between double dollar signs ($$...$$). "
        "End with the final answer in bold."
    )


def build_chat_content(content: str, reply_to: str | None = None) -> str:
    if reply_to:
        return f"{reply_to}\n\n{content}"
    return content
