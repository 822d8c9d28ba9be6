"""Mock responses for testing without API calls."""

# Shape of a real answer: prose around a fenced block, camelCase keys.
MOCK_RESPONSE = """Here is my review of the file.

```json
{
  "issues": [
    {
      "severity": "medium",
      "category": "Logic",
      "message": "Division will raise ZeroDivisionError when the input list is empty",
      "lineNumber": 3,
      "suggestion": "Guard against empty input: if not numbers: return 0",
      "reasoning": "len(numbers) is 0 for an empty list, so the function crashes at runtime."
    }
  ],
  "strengths": ["Small, single-purpose functions"],
  "recommendations": ["Add unit tests for empty and single-element inputs"]
}
```

Let me know if you want a deeper pass."""
