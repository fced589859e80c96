import asyncio
from pathlib import Path
import tempfile
from types import SimpleNamespace
import unittest
from unittest.mock import AsyncMock

from symptom_assist.audio.recording import RecordingSession
from symptom_assist.errors import (
    BackendQuotaError,
    MalformedResponseError,
    NoSymptomsError,
    SymptomIndexError,
)
from symptom_assist.gemini.gateway import AIGateway
from symptom_assist.intake import IntakeSession, extract_from_recording, extract_from_upload
from symptom_assist.models import Symptom


def _gateway_with_replies(replies) -> tuple[AIGateway, AsyncMock]:
    generate_mock = AsyncMock(side_effect=replies)
    client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_mock)))
    return AIGateway(client=client), generate_mock


class _Recorder:
    def __init__(self) -> None:
        self.path: str | None = None

    async def start(self, path, config) -> None:
        self.path = path
        Path(path).write_bytes(b"aac-audio")

    async def stop(self) -> str | None:
        return self.path

    async def dispose(self) -> None:
        return None


def _granted() -> SimpleNamespace:
    return SimpleNamespace(
        has_permission=AsyncMock(return_value=True),
        request_permission=AsyncMock(return_value=True),
    )


class IntakeSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.intake = IntakeSession()
        self.intake.add_symptom(Symptom(name="Fever", severity=5, duration="2 days"))

    def test_analyze_stores_result_and_resets_flag(self) -> None:
        gateway, _ = _gateway_with_replies([SimpleNamespace(text="Possible condition: flu")])

        result = asyncio.run(self.intake.analyze(gateway))

        self.assertIs(self.intake.last_diagnosis, result)
        self.assertFalse(self.intake.is_analyzing)

    def test_flag_is_reset_after_failure(self) -> None:
        gateway = SimpleNamespace(analyze_symptoms=AsyncMock(side_effect=BackendQuotaError("quota")))

        with self.assertRaises(BackendQuotaError):
            asyncio.run(self.intake.analyze(gateway))  # type: ignore[arg-type]

        self.assertFalse(self.intake.is_analyzing)
        self.assertIsNone(self.intake.last_diagnosis)

    def test_flag_is_set_while_analyzing(self) -> None:
        seen: list[bool] = []

        async def _analyze(symptoms):
            seen.append(self.intake.is_analyzing)
            return "result"

        gateway = SimpleNamespace(analyze_symptoms=_analyze)
        asyncio.run(self.intake.analyze(gateway))  # type: ignore[arg-type]

        self.assertEqual(seen, [True])

    def test_analyze_without_symptoms(self) -> None:
        self.intake.clear()
        gateway, generate_mock = _gateway_with_replies([])

        with self.assertRaises(NoSymptomsError):
            asyncio.run(self.intake.analyze(gateway))
        self.assertEqual(generate_mock.await_count, 0)

    def test_remove_symptom(self) -> None:
        removed = self.intake.remove_symptom(0)

        self.assertEqual(removed.name, "Fever")
        self.assertEqual(self.intake.symptoms, [])
        with self.assertRaises(SymptomIndexError):
            self.intake.remove_symptom(0)

    def test_follow_up_and_reset(self) -> None:
        gateway, _ = _gateway_with_replies([SimpleNamespace(text="Rest well.")])

        answer = asyncio.run(self.intake.ask_follow_up(gateway, "What now?"))
        self.assertEqual(answer, "Rest well.")
        self.assertEqual(self.intake.follow_ups, [("What now?", "Rest well.")])
        self.assertEqual(len(gateway.history), 1)

        self.intake.reset(gateway)

        self.assertEqual(self.intake.symptoms, [])
        self.assertEqual(self.intake.follow_ups, [])
        self.assertEqual(gateway.history, ())


class VoiceHandOffTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.directory = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_recording_is_extracted_then_deleted(self) -> None:
        reply = SimpleNamespace(text='[{"name": "Cough", "severity": 3, "duration": "4 days"}]')
        gateway, _ = _gateway_with_replies([reply])
        recording = RecordingSession(_Recorder(), _granted(), directory=self.directory)

        async def _scenario() -> list[Symptom]:
            await recording.start()
            return await extract_from_recording(recording, gateway)

        symptoms = asyncio.run(_scenario())

        self.assertEqual(symptoms, [Symptom(name="Cough", severity=3, duration="4 days")])
        self.assertEqual(list(self.directory.iterdir()), [])

    def test_recording_is_deleted_when_extraction_fails(self) -> None:
        gateway, _ = _gateway_with_replies([SimpleNamespace(text="not json")])
        recording = RecordingSession(_Recorder(), _granted(), directory=self.directory)

        async def _scenario() -> None:
            await recording.start()
            await extract_from_recording(recording, gateway)

        with self.assertRaises(MalformedResponseError):
            asyncio.run(_scenario())
        self.assertEqual(list(self.directory.iterdir()), [])

    def test_upload_is_extracted_then_deleted(self) -> None:
        reply = SimpleNamespace(text='```json\n[{"name": "Rash", "severity": 2, "duration": "1 week"}]\n```')
        gateway, generate_mock = _gateway_with_replies([reply])

        symptoms = asyncio.run(extract_from_upload(b"aac-audio", gateway, directory=self.directory))

        self.assertEqual([s.name for s in symptoms], ["Rash"])
        sent = generate_mock.await_args.kwargs["contents"][0].parts[1].inline_data.data
        self.assertEqual(sent, b"aac-audio")
        self.assertEqual(list(self.directory.iterdir()), [])


if __name__ == "__main__":
    unittest.main()
