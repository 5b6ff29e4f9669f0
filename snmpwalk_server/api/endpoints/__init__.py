# Methods accepted by routes that answer regardless of the HTTP verb
ANY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]
