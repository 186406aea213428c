from .prometheus import track_request, track_response
