from __future__ import annotations
import json
import re
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, ValidationError

from ..dependencies import generation_http_error, get_text_generator
from ..errors import GenerationError
from ..orchestrator import TextGenerator


router = APIRouter(prefix="/dictionary", tags=["dictionary"])


DICTIONARY_INSTRUCTIONS = (
	"You are a warm, friendly dictionary assistant who writes flawless Turkish.\n"
	"For the English word the user gives you, provide two things:\n"
	'1) "meaning": a Turkish explanation of the word, 2 to 4 sentences, everyday but instructive in tone.\n'
	'2) "example": one natural English example sentence that contains the word itself.\n\n'
	'Return ONLY a JSON object: {"meaning": "...", "example": "..."}. No other text.'
)


class DictionaryRequest(BaseModel):
	word: str = Field(min_length=1, max_length=64)


class DictionaryResponse(BaseModel):
	meaning: str = Field(min_length=1)
	example: str = Field(min_length=1)


def _extract_json_object(text: str) -> Dict[str, Any]:
	try:
		return json.loads(text)
	except Exception:
		pass
	code_block = re.search(r"```json\s*([\s\S]*?)\s*```", text)
	if code_block:
		try:
			return json.loads(code_block.group(1))
		except Exception:
			pass
	first = text.find("{")
	last = text.rfind("}")
	if first != -1 and last != -1 and last > first:
		try:
			return json.loads(text[first : last + 1])
		except Exception:
			pass
	raise HTTPException(status_code=502, detail="LLM did not return valid JSON.")


@router.post("", response_model=DictionaryResponse)
async def lookup(req: DictionaryRequest, generator: TextGenerator = Depends(get_text_generator)):
	word = req.word.strip()
	if not word:
		raise HTTPException(status_code=400, detail="word is required")
	try:
		raw = await generator(DICTIONARY_INSTRUCTIONS, f'Word: "{word}"\nReturn only JSON.')
	except GenerationError as exc:
		raise generation_http_error(exc)
	data = _extract_json_object(raw.strip())
	try:
		return DictionaryResponse.model_validate(data)
	except ValidationError:
		raise HTTPException(status_code=502, detail="LLM returned an incomplete dictionary entry")
