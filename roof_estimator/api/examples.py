ROOF_WEBHOOK_EXAMPLES = {
    "manual_squares": {
        "summary": "Retail lead with manual squares",
        "value": {
            "contact_id": "c8Qy1mZ3",
            "jobType": "Retail",
            "stories": "1 Story",
            "squares": 18,
        },
    },
    "auto_measure": {
        "summary": "Retail lead measured from its address",
        "description": "No squares: the roof is measured from satellite data and buffered.",
        "value": {
            "contact": {
                "id": "c8Qy1mZ3",
                "address1": "123 Main St",
                "city": "Austin",
                "state": "TX",
                "postal_code": "78701",
            },
            "customData": {"jobType": "retail", "stories": "2 Stories"},
        },
    },
    "insurance": {
        "summary": "Insurance claim (no estimate)",
        "value": {"jobType": "Insurance Claim", "contact_id": "c8Qy1mZ3"},
    },
}

CALLBACK_EXAMPLES = {
    "completed": {
        "summary": "Estimate finished upstream",
        "value": {
            "callbackId": "lead-42",
            "status": "completed",
            "totalEstimate": 10350,
            "message": "Estimated price generated successfully.",
        },
    },
}
