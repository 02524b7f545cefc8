# Cloud Function entry point for the portfolio API
# portfolio_api is copied next to this file by the predeploy hook in firebase.json
import json
import logging

from firebase_functions import https_fn


@https_fn.on_request(max_instances=10, region="asia-northeast1", memory=256)
def portfolio(req: https_fn.Request) -> https_fn.Response:
    try:
        # Lazy import to catch import-time errors (bad config, missing libs)
        from portfolio_api.api_server import app

        with app.request_context(req.environ):
            return app.full_dispatch_request()
    except Exception as e:
        logging.exception(f"[FUNCTION] Startup failed: {e}")
        body = json.dumps({
            'error': True,
            'message': f"Internal server error: {e}",
            'statusCode': 500,
        }, ensure_ascii=False)
        return https_fn.Response(body, status=200, mimetype='application/json')
