"""Kiosk visitor request tracker."""
