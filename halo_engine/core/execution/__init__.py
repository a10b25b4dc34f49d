"""
Workflow execution: run context, credential resolution, integration
invokers and the sequential execution service.
"""
