import unittest

from symptom_assist.models import Symptom
from symptom_assist.prompts import AUDIO_EXTRACTION_PROMPT, build_diagnosis_prompt


class DiagnosisPromptTests(unittest.TestCase):
    def setUp(self) -> None:
        self.symptoms = [
            Symptom(name="Headache", severity=7, duration="2 days", description="Sharp pain"),
            Symptom(name="Fever", severity=5, duration="1 day"),
        ]

    def test_prompt_lists_each_symptom_as_a_bullet_in_order(self) -> None:
        prompt = build_diagnosis_prompt(self.symptoms)

        self.assertIn(
            "- Headache (Severity: 7/10, Duration: 2 days) - Sharp pain\n"
            "- Fever (Severity: 5/10, Duration: 1 day)\n",
            prompt,
        )

    def test_prompt_is_pure(self) -> None:
        self.assertEqual(build_diagnosis_prompt(self.symptoms), build_diagnosis_prompt(self.symptoms))

    def test_prompt_contains_disclaimer_and_sections(self) -> None:
        prompt = build_diagnosis_prompt(self.symptoms)

        self.assertIn("This is NOT medical advice", prompt)
        for section in (
            "Possible Conditions:",
            "Urgency Level:",
            "Recommended Actions:",
            "When to Seek Immediate Care:",
            "Self-Care Suggestions:",
        ):
            self.assertIn(section, prompt)

    def test_prompt_contains_urgency_rubric(self) -> None:
        prompt = build_diagnosis_prompt(self.symptoms)

        self.assertIn("- Low: Can wait for regular appointment", prompt)
        self.assertIn("- Medium: Should see doctor within a week", prompt)
        self.assertIn("- High: Should see doctor within 24-48 hours", prompt)
        self.assertIn("- Emergency: Seek immediate medical attention", prompt)

    def test_empty_symptom_list_yields_empty_bullet_section(self) -> None:
        prompt = build_diagnosis_prompt([])

        self.assertIn("**Patient Symptoms:**\n\n\n**Please provide:**", prompt)


class AudioExtractionPromptTests(unittest.TestCase):
    def test_prompt_demands_json_array_fields(self) -> None:
        for field in ('"name"', '"severity"', '"duration"', '"description"'):
            self.assertIn(field, AUDIO_EXTRACTION_PROMPT)
        self.assertIn("Provide only the JSON array", AUDIO_EXTRACTION_PROMPT)


if __name__ == "__main__":
    unittest.main()
