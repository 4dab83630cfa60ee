"""Prompt templates for practice content generation."""
from __future__ import annotations

PREAMBLE = """\
You are an expert TOEIC exam creator. Output strict JSON. Ensure all \
explanations and translations are in natural, business-level {language}.
"""

QUESTION_FORMAT = """\
    {{
      "id": 1,
      "text": "Question text",
      "options": ["(A) ...", "(B) ...", "(C) ...", "(D) ..."],
      "answer": "A",
      "explanation": "Why the answer is correct, in {language}"
    }}"""

READING_PROMPT = PREAMBLE + """
Generate a TOEIC Part 7 Reading Comprehension exercise.
1. Create a business article or email (approx 200 words).
2. Provide a {language} translation.
3. Create 2 multiple-choice questions with 4 options each, labelled (A) to (D).
   "answer" is the single correct option letter. Number the questions from 1.

Respond in this exact JSON format only, with no other text:
{{
  "title": "Passage title",
  "content": "The passage",
  "translation": "The passage in {language}",
  "questions": [
""" + QUESTION_FORMAT + """
  ]
}}
"""

LISTENING_PROMPT = PREAMBLE + """
Generate a TOEIC Part 3 Listening exercise.
1. Create a dialogue between a Man and a Woman (approx 150 words). Every \
line's "speaker" must be exactly "Man" or "Woman".
2. Create 3 multiple-choice questions with 4 options each, labelled (A) to (D).
   "answer" is the single correct option letter. Number the questions from 1.

Respond in this exact JSON format only, with no other text:
{{
  "topic": "Short topic",
  "script": [
    {{"speaker": "Man", "text": "..."}},
    {{"speaker": "Woman", "text": "..."}}
  ],
  "questions": [
""" + QUESTION_FORMAT + """
  ]
}}
"""

WRITING_PROMPT = PREAMBLE + """
Generate a TOEIC Part 8 (Essay) Writing prompt.
Include a suggestion/tip in {language} on how to answer.

Respond in this exact JSON format only, with no other text:
{{
  "prompt": "The essay question",
  "suggestion": "Tip in {language}"
}}
"""

MOCK_PROMPT = PREAMBLE + """
Generate a TOEIC Part 7 Double Passage Mock Exam.
Passage 1: Email. Passage 2: Response or Table.
Create 3 questions connecting both passages, with 4 options each labelled \
(A) to (D). "answer" is the single correct option letter. Number the \
questions from 1.

Respond in this exact JSON format only, with no other text:
{{
  "p1_title": "Passage 1 title",
  "p1_content": "Passage 1",
  "p2_title": "Passage 2 title",
  "p2_content": "Passage 2",
  "questions": [
""" + QUESTION_FORMAT + """
  ]
}}
"""

WORD_PROMPT = PREAMBLE + """
Explain the word "{word}" in a business English context for a {language} learner.
1. Meaning in {language}.
2. Part of speech (e.g. n., v., adj.).
3. English example sentence with {language} translation.

Respond in this exact JSON format only, with no other text:
{{
  "meaning": "Meaning in {language}",
  "partOfSpeech": "n.",
  "example": "English example sentence",
  "exampleTranslation": "Translation of the example in {language}"
}}
"""

FEEDBACK_PROMPT = """\
Check this TOEIC essay draft. Provide corrections, a score estimate (0-200 \
scale based on standard TOEIC Writing scoring), and advice in {language}.
Essay: "{essay}"
"""
