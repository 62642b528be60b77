"""
OpenShift Pipelines tutorial demo

Drives the `oc` and `tkn` clients to deploy the Pipelines tutorial onto an OpenShift cluster

Supports the following commands:

* setup: Waits for the OpenShift Pipelines operator, ensures the namespace exists and provisions both the pipeline
and the triggers.

* setup-pipeline / setup-triggers: Provision one half of the tutorial. Pass `skip-bootstrap` to skip the operator
and namespace checks.

* run: Starts the `api` and `ui` pipeline runs and validates their results.

* webhook-url / url / logs: Read-only helpers for the deployed tutorial.

"""
