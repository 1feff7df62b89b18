import cliptransform.errors
import cliptransform.nodes


def parse_period (period: cliptransform.nodes.Period, time_sig_numerator: int) -> float:

	"""
	Resolve a ``bars:beats`` period literal to musical beats.

	A bar is ``time_sig_numerator`` musical beats, matching bar:beat durations
	elsewhere (``1:0t`` is 3 beats in 3/4 and 6 eighth notes in 6/8).

	Raises:
		EvaluationError: If the period is not positive.
	"""

	beats = period.bars * time_sig_numerator + period.beats

	if beats <= 0:
		raise cliptransform.errors.EvaluationError(f"Period must be > 0, got {period.bars}:{period.beats}t")

	return beats
