"""Console lines for the outcome of a race."""

__all__ = ('USAGE', 'format_start', 'format_result', 'format_timeout', 'format_comparison')

USAGE = 'Please provide a CEP as argument. Example: cepracer 01153000'

COMPARISON_HEADER = '=== Response time comparison ==='


def format_start(cep):
    return ['Looking up CEP: %s' % cep]


def format_result(result):
    if not result.ok:
        return ['Error from %s: %s' % (result.backend, result.error)]
    address = result.address
    return ['Fastest response from %s (%.3fs)' % (result.backend, result.elapsed),
            '',
            'CEP: %s' % address.cep,
            'State: %s' % address.state,
            'City: %s' % address.city,
            'Neighborhood: %s' % address.neighborhood,
            'Street: %s' % address.street]


def format_timeout(seconds):
    return ['Error: timed out after %gs' % seconds]


def format_comparison(comparison):
    lines = ['', COMPARISON_HEADER]
    if comparison is None:
        lines.append('Could not get an answer from every backend to compare.')
        return lines
    lines.append('Fastest: %s (%.3fs)' % (comparison.fastest, comparison.fastest_elapsed))
    lines.append('Slowest: %s (%.3fs)' % (comparison.slowest, comparison.slowest_elapsed))
    lines.append('Difference: %.3fs' % comparison.difference)
    for backend, elapsed in comparison.durations:
        lines.append('%s: %.3fs' % (backend, elapsed))
    return lines
