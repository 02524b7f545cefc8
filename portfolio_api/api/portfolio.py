"""
Portfolio blueprint: the single read-only GET endpoint
"""
import logging

from flask import Blueprint, Response, current_app, jsonify, request

logger = logging.getLogger(__name__)

bp = Blueprint('portfolio', __name__)


@bp.route('/', methods=['GET'])
def get_portfolio():
    """Portfolio items or Drive images
    ---
    tags:
      - Portfolio
    parameters:
      - name: action
        in: query
        type: string
        enum: [items, images]
        default: items
        required: false
        description: items returns the spreadsheet rows, images returns the Drive folder images
    responses:
      200:
        description: >
          JSON array of PortfolioItem or ImageRecord. Failures are also
          returned with status 200 as {"error": true, "message": ..., "statusCode": 500}.
        examples:
          application/json:
            - id: 0
              date: "2024-04-01"
              title: Spring illustration
              description: Key visual for a spring campaign
              imageUrl: "https://drive.google.com/open?id=1AbC"
              tags: [Illustration]
              links:
                - label: Youtube
                  url: "https://youtu.be/xyz"
              isCommision: true
    """
    router = current_app.extensions['portfolio_router']
    payload, is_error = router.dispatch(request.args)
    if is_error:
        logger.warning(f"[API] GET {request.full_path} answered with error envelope: {payload['message']}")
    return jsonify(payload)


# Quiet favicon requests to avoid 404 noise
@bp.route('/favicon.ico')
def favicon_silence():
    return Response(status=204)
