"""Global search endpoint."""

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..services.search import SearchSequencer, global_search

sequencer = SearchSequencer()


def _parse_seq(value):
    if value in (None, ''):
        return None
    try:
        seq = int(value)
    except (TypeError, ValueError):
        raise ValidationError({'seq': ['A non-negative integer is required.']})
    if seq < 0:
        raise ValidationError({'seq': ['A non-negative integer is required.']})
    return seq


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def search(request):
    """Search invoices, clients and expenses.

    Clients pass an increasing ``seq`` with every keystroke-driven request;
    answers to requests older than the newest one seen are flagged ``stale``
    and carry no results.
    """

    term = request.query_params.get('q', '')
    seq = _parse_seq(request.query_params.get('seq'))

    if not sequencer.register(request.user.pk, seq):
        return Response({'seq': seq, 'stale': True, 'query': term, 'results': []})

    results = global_search(request.user, term)
    if not sequencer.is_current(request.user.pk, seq):
        return Response({'seq': seq, 'stale': True, 'query': term, 'results': []})
    return Response({'seq': seq, 'stale': False, 'query': term, 'results': results})
