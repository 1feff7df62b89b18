class EvaluationError(Exception):

	"""
	Raised when an expression cannot be evaluated for a given context.

	Examples: an unavailable variable, the wrong number of function arguments,
	or a non-positive waveform period. Appliers catch it per assignment and
	leave the affected value unchanged.
	"""

	pass
