"""Prompt template for extracting symptoms from a voice recording."""

AUDIO_EXTRACTION_PROMPT = """\
You are an expert medical assistant AI. A patient has recorded their symptoms.
Listen to the audio and extract the symptoms into a structured JSON format.

**Instructions:**
1.  Identify each distinct symptom mentioned.
2.  For each symptom, determine its name, severity (1-10), duration, and a brief description.
3.  Format the output as a JSON array of objects. Each object must contain:
    -   `"name"` (string)
    -   `"severity"` (integer, 1-10)
    -   `"duration"` (string, e.g., "3 days", "1 week")
    -   `"description"` (string, optional)

**Example JSON Output:**
```json
[
  {
    "name": "Headache",
    "severity": 7,
    "duration": "2 days",
    "description": "Sharp pain behind the eyes."
  },
  {
    "name": "Fever",
    "severity": 6,
    "duration": "1 day",
    "description": "Feeling hot and cold."
  }
]
```

Provide only the JSON array in your response.
"""
