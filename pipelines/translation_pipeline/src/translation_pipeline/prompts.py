from __future__ import annotations

PARAGRAPH_PROMPT_TEMPLATE = """You are given a paragraph in {source}. The goal is to construct a translation which can be used by somebody who speaks the {target} language to learn the original language.
For each sentence provide a good, but close to the original, translation into the {target} language.
For each word in the sentence, provide a full translation into the {target} language. Give several translation variants if necessary.
For compound words and contractions treat them as single words with appropriate grammatical information. Describe the full form in the 'note' field if necessary.
Add a note on the use of the word if it's not clear how translation maps to the original.
Preserve all punctuation, including all quotation marks and various kinds of parenthesis or braces.
Put HTML-encoded values for punctuation signs in the 'original' field, e.g. comma turns into &comma;.
Mark punctuation with 'isPunctuation'. Set 'isStandalonePunctuation' for punctuation written with spaces around it (e.g. a dash), 'isOpeningParenthesis' for opening brackets and quotes, 'isClosingParenthesis' for closing ones.
If you see an HTML line break (<br>) treat it as punctuation and preserve it in the output correspondingly.
Provide grammatical information for each word.
    - Grammatical information should ONLY be about the original word and how it's used in the original language.
    - Do NOT use concepts from the {target} language when describing the grammar.
    - Use ONLY concepts which make sense and exist in the grammatical system of the original language, but explain them in the {target} language.
    - All the information given must be in {target} language except for the 'originalInitialForm', 'sourceLanguage' and 'targetLanguage' fields.
    - In the 'other' field, include any language-specific grammatical features not covered by standard fields.
Initial forms in the grammar section must contain the form as it appears in the dictionaries in the language of the original and target text.
'sourceLanguage' and 'targetLanguage' must contain ISO 639 Set 3 code of the corresponding language (e.g. 'eng', 'deu', 'rus', 'jpn').
Maintain consistency:
    - Use the same terminology throughout the translation
    - If a word appears multiple times, analyze it consistently
    - Ensure word count matches: every word in original must have a corresponding entry
Special cases:
    - Numbers: treat as words with 'numeral' part of speech
    - Proper nouns: mark in partOfSpeech as 'proper noun', provide transliteration if needed
    - Idioms: provide literal translation in note field, idiomatic translation in translations

Input is given in JSON format, following this template:
{{
    "paragraph": "string"
}}
"""

WORD_PROMPT_TEMPLATE = """You are given a paragraph in {source}, a sentence from it and a word with its position in the sentence numbered from 0.
Provide original spelling of the word as given in the text.
Provide grammatical information for the word. Provide a full translation of the sentence, keeping it as close to the original as possible.
Provide a translation of this word into {target} taking into account all the given context.
Give several variants if necessary.
Add a note on the use of the word if it's not clear how translation maps to the original.
All the information given must be in {target} language.
Initial form in the grammar section must contain the form as it appears in the dictionaries in the language of the original text.

Input is given in JSON format, following this template:
{{
    "paragraph": "string",
    "sentence": "string",
    "word": {{
        "position": number,
        "value": "string"
    }}
}}
"""


def _source_phrase(source_language: str | None) -> str:
    return f"the {source_language} language" if source_language else "a foreign language"


def paragraph_prompt(target_language: str, source_language: str | None = None) -> str:
    return PARAGRAPH_PROMPT_TEMPLATE.format(target=target_language, source=_source_phrase(source_language))


def word_prompt(target_language: str, source_language: str | None = None) -> str:
    return WORD_PROMPT_TEMPLATE.format(target=target_language, source=_source_phrase(source_language))
