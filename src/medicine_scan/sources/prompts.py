# ============================================================================
# src/medicine_scan/sources/prompts.py
# ============================================================================
"""
Prompts for the vision and summary models.
"""

VISION_PROMPT = """Extract all medicine information from this packaging image, focusing on:
1. Medicine name (official name, brand name)
2. Expiry date (in any format)
3. Manufacturer name
4. Batch/lot number
5. Composition (active ingredients and their amounts)
6. Dosage instructions
7. Storage conditions
8. Warnings and precautions

For each identified piece of information, provide the exact text as seen on the packaging.
If the expiry date is found, ensure it's clearly labeled."""


SUMMARY_PROMPT_TEMPLATE = """Based on the following extracted text from a medicine packaging, provide:

1. A brief summary of the medicine's benefits and primary usage
2. Additional information about this type of medication that might be helpful to the patient
3. Any common precautions worth noting beyond what's explicitly stated

Extracted text:
{raw_text}

Return a JSON response with these fields:
{{
  "benefits_summary": "Brief summary of what the medicine is used for",
  "additional_information": "Additional helpful context about this medicine type",
  "precautions": "Important precautions beyond what's explicitly stated"
}}
"""


def build_summary_prompt(raw_text: str) -> str:
    return SUMMARY_PROMPT_TEMPLATE.format(raw_text=raw_text)
