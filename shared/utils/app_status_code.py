class AppStatusCode:
    # Success
    OPERATION_SUCCESSFUL = "100"
    DATA_RETRIEVED_SUCCESSFULLY = "101"
    DATA_CREATED_SUCCESSFULLY = "102"
    DATA_UPDATED_SUCCESSFULLY = "103"
    DATA_DELETED_SUCCESSFULLY = "104"

    # Generic failures
    OPERATION_FAILED = "200"
    INVALID_INPUT = "201"
    RESOURCE_NOT_FOUND = "202"
    DUPLICATE_ENTRY = "203"
    CONFLICT = "204"
    INTERNAL_SERVER_ERROR = "205"

    # Authentication / authorization
    AUTHENTICATION_TOKEN_INVALID = "300"
    AUTHENTICATION_TOKEN_EXPIRED = "301"
    AUTHENTICATION_SESSION_TIMEOUT = "302"
    AUTHENTICATION_USER_INVALID = "303"
    AUTHENTICATION_USER_INACTIVE = "304"
    AUTHENTICATION_CREDENTIALS_INVALID = "305"
    AUTHENTICATION_UNAUTHORIZED_ACCESS = "306"
    CSRF_TOKEN_INVALID = "307"
    RATE_LIMIT_EXCEEDED = "308"

    # Subscription
    SUBSCRIPTION_LIMIT_REACHED = "400"
    SUBSCRIPTION_NOT_FOUND = "401"
