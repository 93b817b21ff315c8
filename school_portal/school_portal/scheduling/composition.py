"""
Schedule Composition Service

Layers override blocks on top of a base day schedule:
- Every block claims its span from the blocks accepted before it
- Partially covered blocks are split, keeping their uncovered remainders
- The result is conflict-free and ordered by start time

Pure functions only. Nothing here reads or writes the database.
"""

import math
from datetime import datetime, time, timedelta
from numbers import Real
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Union

import frappe


TimeValue = Union[datetime, time, timedelta, int, float]


class ScheduleValidationError(frappe.ValidationError):
	"""Malformed block passed to compose(). Nothing was composed."""

	def __init__(
		self,
		message: str,
		source: Optional[str] = None,
		index: Optional[int] = None,
		label: Any = None
	):
		super().__init__(message)
		self.source = source
		self.index = index
		self.label = label


class Block(NamedTuple):
	"""Labeled time span on a single day. The label is never interpreted."""

	label: str
	start: TimeValue
	end: TimeValue

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> "Block":
		return cls(data["label"], data["start"], data["end"])

	def as_dict(self) -> Dict[str, Any]:
		return {"label": self.label, "start": self.start, "end": self.end}


def compose(base: Iterable[Any], overrides: Iterable[Any]) -> List[Block]:
	"""
	Combina el horario base con las ediciones del usuario.

	Args:
		base: bloques del horario base (Block, dict o tupla de 3)
		overrides: bloques de edición, del más antiguo al más reciente

	Returns:
		list[Block]: timeline sin solapamientos, ordenado por start

	Raises:
		ScheduleValidationError: si algún bloque tiene start >= end o
			límites que no son tiempos comparables

	Algoritmo:
		1. Validar todos los bloques (base y overrides) antes de insertar
		2. Insertar cada bloque de base, en orden
		3. Insertar cada override, en orden (el último gana)
		4. Ordenar por (start, end)
	"""
	base_blocks = validate_blocks(base, "base")
	override_blocks = validate_blocks(overrides, "overrides")
	_validate_comparable(base_blocks, override_blocks)

	timeline: List[Block] = []

	for block in base_blocks:
		timeline = insert_block(timeline, block)

	for block in override_blocks:
		timeline = insert_block(timeline, block)

	return sort_timeline(timeline)


def insert_block(timeline: List[Block], block: Block) -> List[Block]:
	"""
	Inserta un bloque en un timeline ya resuelto.

	El bloque nuevo se queda con todo su rango; los bloques que se solapan
	conservan solo lo que queda fuera de él. No modifica `timeline`.

	Args:
		timeline: bloques aceptados hasta ahora (sin solapamientos)
		block: bloque válido a insertar

	Returns:
		list[Block]: intactos + remanentes + block
	"""
	untouched = []
	remainders = []

	for accepted in timeline:
		if _overlaps(accepted, block):
			remainders.extend(split_block(accepted, block))
		else:
			untouched.append(accepted)

	return untouched + remainders + [block]


def split_block(block: Block, claimed: Block) -> List[Block]:
	"""
	Resta el rango de `claimed` de un bloque.

	Args:
		block: bloque original
		claimed: bloque que reclama su rango

	Returns:
		list[Block]: 0, 1 o 2 remanentes con el label de `block`
	"""
	# Casos:
	# 1. Sin overlap -> [block]
	# 2. claimed cubre todo block -> []
	# 3. claimed cubre el inicio -> [parte final]
	# 4. claimed cubre el final -> [parte inicial]
	# 5. claimed está en medio -> [parte inicial, parte final]
	if not _overlaps(block, claimed):
		return [block]

	remainders = []

	# Comparaciones estrictas: nunca se generan remanentes de duración cero
	if block.start < claimed.start:
		remainders.append(Block(block.label, block.start, claimed.start))

	if block.end > claimed.end:
		remainders.append(Block(block.label, claimed.end, block.end))

	return remainders


def sort_timeline(blocks: Iterable[Block]) -> List[Block]:
	"""Sort by start, then end. Stable, so equal keys keep insertion order."""
	return sorted(blocks, key=lambda block: (block.start, block.end))


def merge_adjacent(blocks: Iterable[Block]) -> List[Block]:
	"""
	Une bloques contiguos que tienen el mismo label.

	Pensado para mostrar un timeline ya compuesto: un override que reemplaza
	una clase por la misma clase deja dos bloques pegados.

	Args:
		blocks: timeline sin solapamientos

	Returns:
		list[Block]: timeline con los bloques contiguos del mismo label unidos
	"""
	ordered = sort_timeline(blocks)
	if not ordered:
		return []

	merged = [ordered[0]]

	for current in ordered[1:]:
		last_merged = merged[-1]

		if current.label == last_merged.label and current.start == last_merged.end:
			merged[-1] = last_merged._replace(end=current.end)
		else:
			merged.append(current)

	return merged


def validate_blocks(blocks: Iterable[Any], source: str = "blocks") -> List[Block]:
	"""
	Valida y normaliza una secuencia de bloques.

	Args:
		blocks: Block, mappings con label/start/end, o tuplas (label, start, end)
		source: nombre de la secuencia, para los mensajes de error

	Returns:
		list[Block]: los mismos bloques como Block

	Raises:
		ScheduleValidationError: en el primer bloque inválido
	"""
	validated = []

	for index, item in enumerate(blocks):
		block = _coerce_block(item, source, index)
		validate_block(block, source, index)
		validated.append(block)

	return validated


def validate_block(block: Block, source: str = "blocks", index: Optional[int] = None) -> None:
	"""Raise ScheduleValidationError unless block.start < block.end."""
	for bound in ("start", "end"):
		value = getattr(block, bound)
		if not _is_time_value(value):
			raise ScheduleValidationError(
				f"{_describe(source, index, block.label)}: {bound} {value!r} is not a time value",
				source=source, index=index, label=block.label
			)

	try:
		is_ordered = block.start < block.end
	except TypeError:
		raise ScheduleValidationError(
			f"{_describe(source, index, block.label)}: start and end are not comparable",
			source=source, index=index, label=block.label
		) from None

	if not is_ordered:
		raise ScheduleValidationError(
			f"{_describe(source, index, block.label)}: start ({block.start}) must be earlier than end ({block.end})",
			source=source, index=index, label=block.label
		)


def _coerce_block(item: Any, source: str, index: int) -> Block:
	if isinstance(item, Block):
		return item

	if isinstance(item, Mapping):
		try:
			return Block.from_dict(item)
		except KeyError as e:
			raise ScheduleValidationError(
				f"{_describe(source, index, item.get('label'))}: missing {e.args[0]!r}",
				source=source, index=index, label=item.get("label")
			) from None

	if isinstance(item, (tuple, list)) and len(item) == 3:
		return Block(*item)

	raise ScheduleValidationError(
		f"{_describe(source, index, None)}: cannot read {type(item).__name__} as a block",
		source=source, index=index
	)


def _validate_comparable(*sequences: List[Block]) -> None:
	"""All blocks of one call must share a time type (no naive/aware mix)."""
	reference = None

	for blocks, source in zip(sequences, ("base", "overrides")):
		for index, block in enumerate(blocks):
			if reference is None:
				reference = block.start
				continue
			try:
				block.start < reference
			except TypeError:
				raise ScheduleValidationError(
					f"{_describe(source, index, block.label)}: "
					f"{type(block.start).__name__} cannot be compared with {type(reference).__name__}",
					source=source, index=index, label=block.label
				) from None


def _is_time_value(value: Any) -> bool:
	if isinstance(value, bool):
		return False
	if isinstance(value, (datetime, time, timedelta)):
		return True
	if isinstance(value, Real):
		return math.isfinite(value)
	return False


def _overlaps(a: Block, b: Block) -> bool:
	return a.start < b.end and a.end > b.start


def _describe(source: str, index: Optional[int], label: Any) -> str:
	position = f"{source}[{index}]" if index is not None else source
	return f"Invalid block {position} ({label!r})"
