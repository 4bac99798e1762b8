from .oauth import OAuthClient, OAuthToken
from .token_manager import ClientCredentialsAuthProvider, CachedToken, REFRESH_BUFFER_MS
