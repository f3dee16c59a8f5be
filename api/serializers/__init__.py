"""Serializer package exports for convenient imports in views and tests."""

from .serializers_auth import (CustomTokenObtainPairSerializer, LoginSerializer,
                               RegisterSerializer, UserProfileSerializer)
